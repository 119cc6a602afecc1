"""Parse a game detail page into a GameDetail.

Each scalar field has an ordered chain of strategies. A strategy takes the
page and returns a value or None; the first value wins and later
strategies are never consulted for that field. Detail pages often repeat
labels (prize tier sections say "guaranteed" too), so chain order decides
which occurrence is used.
"""
import logging
import re
from functools import cached_property
from typing import Callable, Optional, Sequence, TypeVar

from selectolax.parser import HTMLParser, Node

from scratchscan.parse.models import GameDetail
from scratchscan.parse.normalize import (
    NOT_AVAILABLE,
    has_odds,
    parse_count,
    parse_currency,
    parse_odds,
)
from scratchscan.parse.prize_table import resolve_prize_table

logger = logging.getLogger(__name__)

T = TypeVar("T")

STRUCTURAL_TAGS = {"tr", "dl", "p"}
STRUCTURAL_CLASS = "game-detail"

COUNT_TOKEN = re.compile(r"\d[\d,]*")
DOLLAR_TOKEN = re.compile(r"\$\s*\d[\d,]*(?:\.\d+)?")

TICKETS_PHRASE = re.compile(r"There are approximately\s+([\d,]+)\*?\s+tickets", re.IGNORECASE)
GUARANTEED_PHRASE = re.compile(
    r"Guaranteed\s+Total\s+Prize\s+Amount\s*[=:]?\s*(\$\s*\d[\d,]*(?:\.\d+)?)", re.IGNORECASE
)
PACK_SIZE_PHRASE = re.compile(r"Pack\s+Size\s*:\s*(\d[\d,]*)", re.IGNORECASE)
ODDS_PHRASE = re.compile(
    r"Overall\s+odds.{0,160}?(1\s+in\s+\d+(?:,\d{3})*(?:\.\d+)?)", re.IGNORECASE | re.DOTALL
)
PACK_SIZE_SAME_LINE = re.compile(r"pack size[^\d]*([\d,]+)", re.IGNORECASE)


class DetailPage:
    """Parsed detail page with lazily flattened views used by the strategies."""

    def __init__(self, html_content: str):
        self.parser = HTMLParser(html_content or "<html><body></body></html>")

    @cached_property
    def text(self) -> str:
        """Body text, concatenated without separators."""
        root = self.parser.body or self.parser.root
        return root.text() if root is not None else ""

    @cached_property
    def lines(self) -> list[str]:
        return [line.strip() for line in self.text.split("\n") if line.strip()]

    @cached_property
    def labeled_elements(self) -> list[str]:
        """Text of table rows, definition lists, paragraphs and .game-detail blocks, in document order."""
        if self.parser.root is None:
            return []
        texts = []
        for node in self.parser.root.traverse(include_text=False):
            if _is_labeled_element(node):
                texts.append(node.text())
        return texts


def _is_labeled_element(node: Node) -> bool:
    if node.tag in STRUCTURAL_TAGS:
        return True
    classes = (node.attributes.get("class") or "").split()
    return STRUCTURAL_CLASS in classes


def first_match(strategies: Sequence[Callable[[DetailPage], Optional[T]]], page: DetailPage) -> Optional[T]:
    """Value of the first strategy that returns something other than None."""
    for strategy in strategies:
        value = strategy(page)
        if value is not None:
            logger.debug(f"{strategy.__name__} resolved {value!r}")
            return value
    return None


def _positive_count(text: Optional[str]) -> Optional[int]:
    value = parse_count(text)
    return value if value > 0 else None


def _positive_currency(text: Optional[str]) -> Optional[float]:
    value = parse_currency(text)
    return value if value > 0 else None


def _first_token(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    return match.group(0) if match else None


def _odds_in(text: Optional[str]) -> Optional[str]:
    return parse_odds(text) if has_odds(text) else None


def _scan_elements(page: DetailPage, label: str, extract: Callable[[str], Optional[T]]) -> Optional[T]:
    for text in page.labeled_elements:
        if label in text.lower():
            value = extract(text)
            if value is not None:
                return value
    return None


def _scan_lines(
    page: DetailPage,
    labels: Sequence[str],
    same_line: Callable[[str], Optional[T]],
    next_line: Callable[[str], Optional[T]],
) -> Optional[T]:
    lines = page.lines
    for idx, line in enumerate(lines):
        lower = line.lower()
        if not any(label in lower for label in labels):
            continue
        value = same_line(line)
        if value is None and idx + 1 < len(lines):
            value = next_line(lines[idx + 1])
        if value is not None:
            return value
    return None


# Total tickets

def tickets_from_phrase(page: DetailPage) -> Optional[int]:
    match = TICKETS_PHRASE.search(page.text)
    return _positive_count(match.group(1)) if match else None


def tickets_from_elements(page: DetailPage) -> Optional[int]:
    return _scan_elements(
        page, "total tickets", lambda text: _positive_count(_first_token(COUNT_TOKEN, text))
    )


def tickets_from_lines(page: DetailPage) -> Optional[int]:
    def count_in(line: str) -> Optional[int]:
        return _positive_count(_first_token(COUNT_TOKEN, line))

    return _scan_lines(page, ["total tickets"], count_in, count_in)


# Guaranteed total prize amount

def guaranteed_from_phrase(page: DetailPage) -> Optional[float]:
    match = GUARANTEED_PHRASE.search(page.text)
    return _positive_currency(match.group(1)) if match else None


def guaranteed_from_elements(page: DetailPage) -> Optional[float]:
    return _scan_elements(
        page, "guaranteed", lambda text: _positive_currency(_first_token(DOLLAR_TOKEN, text))
    )


def guaranteed_from_lines(page: DetailPage) -> Optional[float]:
    def dollars_in(line: str) -> Optional[float]:
        return _positive_currency(_first_token(DOLLAR_TOKEN, line))

    return _scan_lines(page, ["guaranteed"], dollars_in, dollars_in)


# Pack size

def pack_size_from_phrase(page: DetailPage) -> Optional[int]:
    match = PACK_SIZE_PHRASE.search(page.text)
    return _positive_count(match.group(1)) if match else None


def pack_size_from_elements(page: DetailPage) -> Optional[int]:
    return _scan_elements(
        page, "pack size", lambda text: _positive_count(_first_token(COUNT_TOKEN, text))
    )


def pack_size_from_lines(page: DetailPage) -> Optional[int]:
    def same_line(line: str) -> Optional[int]:
        match = PACK_SIZE_SAME_LINE.search(line)
        return _positive_count(match.group(1)) if match else None

    return _scan_lines(page, ["pack size"], same_line, _positive_count)


# Overall odds

def odds_from_phrase(page: DetailPage) -> Optional[str]:
    match = ODDS_PHRASE.search(page.text)
    return parse_odds(match.group(1)) if match else None


def odds_from_elements(page: DetailPage) -> Optional[str]:
    return _scan_elements(page, "overall odds", _odds_in)


def odds_from_lines(page: DetailPage) -> Optional[str]:
    return _scan_lines(page, ["overall odds"], _odds_in, _odds_in)


TOTAL_TICKETS_CHAIN = (tickets_from_phrase, tickets_from_elements, tickets_from_lines)
GUARANTEED_CHAIN = (guaranteed_from_phrase, guaranteed_from_elements, guaranteed_from_lines)
PACK_SIZE_CHAIN = (pack_size_from_phrase, pack_size_from_elements, pack_size_from_lines)
OVERALL_ODDS_CHAIN = (odds_from_phrase, odds_from_elements, odds_from_lines)


def extract_detail(html_content: str) -> GameDetail:
    """Extract pack size, guaranteed amount, ticket count, odds and top prize from a detail page."""
    page = DetailPage(html_content)
    prizes = resolve_prize_table(page.parser)

    detail = GameDetail(
        pack_size=first_match(PACK_SIZE_CHAIN, page) or 0,
        guaranteed_prize_amount=first_match(GUARANTEED_CHAIN, page) or 0.0,
        total_tickets=first_match(TOTAL_TICKETS_CHAIN, page) or 0,
        overall_odds=first_match(OVERALL_ODDS_CHAIN, page) or NOT_AVAILABLE,
        top_prize=prizes.top_prize,
        top_prize_in_game=prizes.top_prize_in_game,
        top_prize_claimed=prizes.top_prize_claimed,
        prizes_found=prizes.prizes_found,
    )

    if not detail.pack_size:
        logger.debug("Pack size not found on detail page")
    if not prizes.prizes_found:
        logger.debug("No prize tiers parsed on detail page")
    return detail
