"""Image URL helpers for payloads returned by the resource service.

The service stores uploaded images as paths relative to its own origin
(``/uploads/news/abc.jpg``). These helpers turn them into absolute URLs.
"""

from __future__ import annotations

from urllib.parse import quote, urlencode

from storefront_query.shared.constants import APIConfig

PLACEHOLDER_HOST = "https://via.placeholder.com"
PLACEHOLDER_COLORS = "e2e8f0/64748b"
DEFAULT_PLACEHOLDER_WIDTH = 300
DEFAULT_PLACEHOLDER_HEIGHT = 200
DEFAULT_IMAGE_QUALITY = 80


def backend_origin(api_base_url: str) -> str:
    """Strip the ``/api`` suffix from the API base URL.

    Example:
        >>> backend_origin("http://localhost:5002/api")
        'http://localhost:5002'
    """
    base = api_base_url.rstrip("/")
    if base.endswith(APIConfig.API_PATH_SUFFIX):
        base = base[: -len(APIConfig.API_PATH_SUFFIX)]
    return base


def get_placeholder_url(
    width: int = DEFAULT_PLACEHOLDER_WIDTH,
    height: int = DEFAULT_PLACEHOLDER_HEIGHT,
    text: str | None = None,
) -> str:
    """Build a placeholder image URL."""
    label = text or f"{width}x{height}"
    return (
        f"{PLACEHOLDER_HOST}/{width}x{height}/{PLACEHOLDER_COLORS}"
        f"?text={quote(label, safe='')}"
    )


def get_image_url(image_url: str | None, api_base_url: str) -> str:
    """Resolve an image URL from the service against the backend origin.

    Args:
        image_url: Absolute URL, absolute path or bare relative path
        api_base_url: Configured API base URL

    Returns:
        Absolute URL, or a placeholder when image_url is empty
    """
    if not image_url:
        return get_placeholder_url()

    if image_url.startswith(("http://", "https://")):
        return image_url

    origin = backend_origin(api_base_url)
    if image_url.startswith("/"):
        return f"{origin}{image_url}"
    return f"{origin}/{image_url}"


def get_optimized_image_url(
    image_url: str | None,
    api_base_url: str,
    width: int | None = None,
    height: int | None = None,
    quality: int = DEFAULT_IMAGE_QUALITY,
) -> str:
    """Resolve an image URL and append size/quality hints.

    Placeholders are returned without parameters. Quality is only added
    when it differs from the default.
    """
    url = get_image_url(image_url, api_base_url)
    if url.startswith(PLACEHOLDER_HOST):
        return url

    params: list[tuple[str, str]] = []
    if width:
        params.append(("w", str(width)))
    if height:
        params.append(("h", str(height)))
    if quality != DEFAULT_IMAGE_QUALITY:
        params.append(("q", str(quality)))

    return f"{url}?{urlencode(params)}" if params else url
