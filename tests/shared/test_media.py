"""Tests for image URL helpers."""

import pytest

from storefront_query.shared.media import (
    backend_origin,
    get_image_url,
    get_optimized_image_url,
    get_placeholder_url,
)

API_BASE = "https://shop.example.com/api"


@pytest.mark.parametrize(
    ("base_url", "origin"),
    [
        ("http://localhost:5002/api", "http://localhost:5002"),
        ("http://localhost:5002/api/", "http://localhost:5002"),
        ("https://cdn.example.com", "https://cdn.example.com"),
    ],
)
def test_backend_origin(base_url, origin):
    assert backend_origin(base_url) == origin


class TestImageUrl:
    def test_absolute_path(self):
        assert get_image_url("/uploads/a.jpg", API_BASE) == "https://shop.example.com/uploads/a.jpg"

    def test_relative_path(self):
        assert get_image_url("uploads/a.jpg", API_BASE) == "https://shop.example.com/uploads/a.jpg"

    def test_absolute_url_is_untouched(self):
        url = "https://images.example.com/a.jpg"

        assert get_image_url(url, API_BASE) == url

    @pytest.mark.parametrize("image_url", [None, ""])
    def test_missing_image_gives_placeholder(self, image_url):
        assert get_image_url(image_url, API_BASE) == get_placeholder_url()

    def test_placeholder_text_is_quoted(self):
        assert get_placeholder_url(100, 50, "No image").endswith("/100x50/e2e8f0/64748b?text=No%20image")


class TestOptimizedImageUrl:
    def test_size_and_quality(self):
        url = get_optimized_image_url("/uploads/a.jpg", API_BASE, width=400, height=300, quality=60)

        assert url == "https://shop.example.com/uploads/a.jpg?w=400&h=300&q=60"

    def test_default_quality_is_omitted(self):
        assert get_optimized_image_url("/uploads/a.jpg", API_BASE) == (
            "https://shop.example.com/uploads/a.jpg"
        )

    def test_placeholder_has_no_hints(self):
        assert get_optimized_image_url(None, API_BASE, width=400) == get_placeholder_url()
