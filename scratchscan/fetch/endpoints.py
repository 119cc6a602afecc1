"""URL builders for Texas Lottery pages."""
from typing import Optional

from scratchscan.config import config
from scratchscan.parse.listing import build_detail_url


def get_listing_url() -> str:
    """URL of the page listing every active scratch-off game."""
    return config.LISTING_URL


def get_detail_url(reference: str, base_url: Optional[str] = None) -> str:
    """Absolute URL for a detail page reference (absolute URL or site path)."""
    return build_detail_url(reference, base_url or config.BASE_URL)
