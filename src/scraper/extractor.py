"""
Detail Extractor: reads structured fields from a place detail page.

Every field uses layered fallbacks, first success wins. Only a missing page
is fatal; everything else is best effort.
"""

import re
from typing import Optional
from urllib.parse import unquote

from playwright.async_api import Page

from src.core.logging import get_logger
from src.scraper.errors import PageNotInitializedError
from src.scraper.models import PlaceRecord

logger = get_logger(__name__)


# Heading the host UI shows for the list itself; never a real place name
PLACEHOLDER_NAME = "Want to go"

PLACE_ID_RE = re.compile(r"!1s(0x[a-f0-9:]+)")
URL_NAME_RE = re.compile(r"/place/([^/@]+)")
SAVE_LABEL_RE = re.compile(r"Save (.+?) to")

HEADING_SELECTOR = "h1"
SAVE_CONTROL_SELECTOR = '[aria-label*="Save"][aria-label*="to"]'
ADDRESS_CONTROL_SELECTOR = 'button[data-item-id="address"]'
ADDRESS_TEXT_SELECTOR = 'div[class*="fontBodyMedium"]'


def place_id_from_url(url: str) -> Optional[str]:
    """
    Hex place identifier embedded in a detail URL.

    Example:
        >>> place_id_from_url("https://www.google.com/maps/place/X/data=!4m2!1s0x89c2:0x1a2b!8m2")
        '0x89c2:0x1a2b'
    """
    m = PLACE_ID_RE.search(url or "")
    return m.group(1) if m else None


def name_from_url(url: str) -> Optional[str]:
    """
    Decoded, de-slugified name from the ``/place/<name>/`` path segment.

    Example:
        >>> name_from_url("https://www.google.com/maps/place/Joe's+Pizza/@40.7,-73.9")
        "Joe's Pizza"
    """
    m = URL_NAME_RE.search(url or "")
    if not m:
        return None
    name = unquote(m.group(1).replace("+", " ")).strip()
    return name or None


def name_from_save_label(label: Optional[str]) -> Optional[str]:
    """Name parsed from a ``Save <name> to list`` aria-label."""
    m = SAVE_LABEL_RE.search(label or "")
    return m.group(1) if m else None


def is_usable_name(name: Optional[str], placeholder: str = PLACEHOLDER_NAME) -> bool:
    return bool(name and name.strip()) and name.strip() != placeholder


class DetailExtractor:
    """
    Extracts a PlaceRecord from the detail page currently shown.

    Example:
        >>> record = await DetailExtractor(page).extract()
        >>> record.name, record.place_id
        ("Joe's Pizza", '0x89c2:0x1a2b')
    """

    def __init__(
        self,
        page: Optional[Page],
        placeholder: str = PLACEHOLDER_NAME,
        settle_ms: int = 300,
        save_control_timeout_ms: int = 400,
        address_timeout_ms: int = 800,
    ):
        self.page = page
        self.placeholder = placeholder
        self.settle_ms = settle_ms
        self.save_control_timeout_ms = save_control_timeout_ms
        self.address_timeout_ms = address_timeout_ms

    async def _name_from_headings(self) -> Optional[str]:
        try:
            for heading in await self.page.locator(HEADING_SELECTOR).all():
                text = await heading.text_content()
                if is_usable_name(text, self.placeholder):
                    return text.strip()
        except Exception as e:
            logger.debug(f"Heading lookup failed: {e}")
        return None

    async def _name_from_save_control(self) -> Optional[str]:
        try:
            control = self.page.locator(SAVE_CONTROL_SELECTOR).first
            if await control.is_visible(timeout=self.save_control_timeout_ms):
                return name_from_save_label(await control.get_attribute("aria-label"))
        except Exception as e:
            logger.debug(f"Save control lookup failed: {e}")
        return None

    async def _address(self) -> Optional[str]:
        try:
            control = self.page.locator(ADDRESS_CONTROL_SELECTOR)
            if await control.is_visible(timeout=self.address_timeout_ms):
                return await control.locator(ADDRESS_TEXT_SELECTOR).first.text_content()
        except Exception as e:
            logger.debug(f"Address lookup failed: {e}")
        return None

    async def extract(self) -> PlaceRecord:
        """
        Read name, address and identifier from the current detail page.

        Raises:
            PageNotInitializedError: If there is no page to read from
        """
        if self.page is None:
            raise PageNotInitializedError()

        await self.page.wait_for_timeout(self.settle_ms)
        url = self.page.url

        name = name_from_url(url)
        if not is_usable_name(name, self.placeholder):
            name = await self._name_from_headings()
        if not is_usable_name(name, self.placeholder):
            name = await self._name_from_save_control()

        return PlaceRecord(
            name=name,
            url=url,
            address=await self._address(),
            place_id=place_id_from_url(url),
        )
