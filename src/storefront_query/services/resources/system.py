"""Public system data queries.

Site settings, logo and banners come from the public system endpoints. The
derived views (header, footer, home banners, payment info) read the cached
queries and pick out the fields the storefront pages use.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from storefront_query.services.api_models import ApiEnvelope
from storefront_query.services.query_cache import QueryObserver
from storefront_query.services.resources.base import ResourceQueries
from storefront_query.services.resources.query_keys import SystemKeys
from storefront_query.shared.constants import Endpoints, StaleTimes


@dataclass(frozen=True)
class HeaderData:
    logo: Any = None
    site_name: str | None = None


@dataclass(frozen=True)
class FooterData:
    contact_info: Any = None
    social_media: Any = None
    banking_info: Any = None


@dataclass(frozen=True)
class PaymentInfo:
    banking_info: Mapping[str, Any] | None = None
    qr_code_image: Mapping[str, Any] | None = None


def _payload(envelope: ApiEnvelope | None) -> Any:
    return envelope.data if envelope is not None else None


def _field(payload: Any, name: str) -> Any:
    if isinstance(payload, Mapping):
        return payload.get(name)
    return None


def active_banners(banners: Any) -> list[Mapping[str, Any]]:
    """Keep active banners, ordered by their ``order`` field.

    Example:
        >>> active_banners([
        ...     {"title": "b", "isActive": True, "order": 2},
        ...     {"title": "a", "isActive": True, "order": 1},
        ...     {"title": "c", "isActive": False, "order": 0},
        ... ])
        [{'title': 'a', 'isActive': True, 'order': 1}, {'title': 'b', 'isActive': True, 'order': 2}]
    """
    if not isinstance(banners, list):
        return []
    active = [
        banner
        for banner in banners
        if isinstance(banner, Mapping) and banner.get("isActive")
    ]
    return sorted(active, key=lambda banner: banner.get("order") or 0)


class SystemQueries(ResourceQueries):
    """Cached queries over public system data (fresh for 5 minutes)."""

    def get_settings(self) -> QueryObserver:
        return self._observe(
            SystemKeys.SETTINGS,
            Endpoints.SYSTEM_PUBLIC_SETTINGS,
            stale_time=StaleTimes.SYSTEM,
        )

    def get_logo(self) -> QueryObserver:
        return self._observe(
            SystemKeys.LOGO,
            Endpoints.SYSTEM_LOGO,
            stale_time=StaleTimes.SYSTEM,
        )

    def get_banners(self) -> QueryObserver:
        return self._observe(
            SystemKeys.BANNERS,
            Endpoints.SYSTEM_BANNERS,
            stale_time=StaleTimes.SYSTEM,
        )

    async def header_data(self) -> HeaderData:
        """Logo and site name for the page header."""
        logo, settings = await asyncio.gather(
            self.get_logo().fetch(),
            self.get_settings().fetch(),
        )
        return HeaderData(
            logo=_payload(logo),
            site_name=_field(_payload(settings), "siteName"),
        )

    async def footer_data(self) -> FooterData:
        """Contact, social media and banking details for the page footer."""
        settings = _payload(await self.get_settings().fetch())
        return FooterData(
            contact_info=_field(settings, "contactInfo"),
            social_media=_field(settings, "socialMedia"),
            banking_info=_field(settings, "bankingInfo"),
        )

    async def home_banners(self) -> list[Mapping[str, Any]]:
        """Active banners for the home page, in display order."""
        return active_banners(_payload(await self.get_banners().fetch()))

    async def payment_info(self) -> PaymentInfo:
        """Banking details and QR code image shown at checkout."""
        banking_info = _field(_payload(await self.get_settings().fetch()), "bankingInfo")
        if not isinstance(banking_info, Mapping):
            banking_info = None
        return PaymentInfo(
            banking_info=banking_info,
            qr_code_image=_field(banking_info, "qrCodeImage"),
        )


__all__ = [
    "FooterData",
    "HeaderData",
    "PaymentInfo",
    "SystemQueries",
    "active_banners",
]
