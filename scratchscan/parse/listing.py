"""Parse the games index page into game summaries."""
import logging
from typing import Optional

from selectolax.parser import HTMLParser, Node

from scratchscan.config import config
from scratchscan.parse.models import GameSummary
from scratchscan.parse.normalize import parse_currency

logger = logging.getLogger(__name__)

# Column order on the index page: Game#(0), Start Date(1), Ticket Price(2), Empty(3), Game Name(4)
NUMBER_COL = 0
START_DATE_COL = 1
PRICE_COL = 2
NAME_COL = 4
MIN_CELLS = 5


def build_detail_url(href: str, base_url: str) -> str:
    """Absolute detail URL; relative targets get the site origin prepended."""
    href = href.strip()
    if href.startswith("http"):
        return href
    base = base_url.rstrip("/")
    return f"{base}{'' if href.startswith('/') else '/'}{href}"


def _detail_link(cell: Node, link_pattern: str) -> Optional[Node]:
    """First link in the cell pointing at a detail page."""
    for link in cell.css("a[href]"):
        href = link.attributes.get("href") or ""
        if link_pattern in href:
            return link
    return None


def _cell_text(cells: list[Node], index: Optional[int]) -> str:
    if index is None or index >= len(cells):
        return ""
    return cells[index].text(strip=True)


def _is_usable_name(name: str) -> bool:
    return bool(name) and name != "*"


def _enclosing_table(row: Node) -> Optional[Node]:
    node = row.parent
    while node is not None and node.tag != "table":
        node = node.parent
    return node


def _header_positions(row: Node) -> dict[str, int]:
    """Column positions read from the header of the row's table."""
    table = _enclosing_table(row)
    if table is None:
        return {}
    header = table.css_first("thead tr") or table.css_first("tr")
    if header is None:
        return {}

    positions: dict[str, int] = {}
    for idx, cell in enumerate(header.css("th, td")):
        text = cell.text(strip=True).lower()
        if "start" in text and "start_date" not in positions:
            positions["start_date"] = idx
        elif "price" in text and "price" not in positions:
            positions["price"] = idx
        elif "name" in text and "name" not in positions:
            positions["name"] = idx
    return positions


def _row_fields(row: Node, cells: list[Node]) -> Optional[tuple[str, str, str]]:
    """(start_date, price_text, name) for a game row, or None if the row is not usable."""
    if len(cells) >= MIN_CELLS:
        name = _cell_text(cells, NAME_COL)
        if _is_usable_name(name):
            return _cell_text(cells, START_DATE_COL), _cell_text(cells, PRICE_COL), name

    # Layout differs from the expected column order: fall back to header labels
    positions = _header_positions(row)
    if "name" not in positions:
        return None
    name = _cell_text(cells, positions["name"])
    if not _is_usable_name(name):
        return None
    logger.debug(f"Listing row read with header positions {positions}")
    return (
        _cell_text(cells, positions.get("start_date")),
        _cell_text(cells, positions.get("price")),
        name,
    )


def extract_games(
    html_content: str,
    base_url: Optional[str] = None,
    link_pattern: Optional[str] = None,
) -> list[GameSummary]:
    """
    Extract game summaries from the games index page.

    A row is a game row only when its first cell links to a detail page.
    Index pages repeat the game link on prize-tier rows, so the first row
    seen for a game number wins. Rows without a link or a name are skipped.
    """
    if not html_content:
        return []

    base_url = base_url or config.BASE_URL
    link_pattern = link_pattern or config.DETAIL_LINK_PATTERN

    parser = HTMLParser(html_content)
    games: list[GameSummary] = []
    seen: set[str] = set()

    for row in parser.css("table tr"):
        cells = row.css("td")
        if not cells:
            continue

        link = _detail_link(cells[NUMBER_COL], link_pattern)
        if link is None:
            continue

        game_number = link.text(strip=True)
        if not game_number or game_number in seen:
            continue

        fields = _row_fields(row, cells)
        if fields is None:
            continue
        start_date, price_text, name = fields

        seen.add(game_number)
        games.append(
            GameSummary(
                game_number=game_number,
                game_name=name,
                start_date=start_date,
                ticket_price=parse_currency(price_text),
                detail_url=build_detail_url(link.attributes.get("href") or "", base_url),
            )
        )

    logger.info(f"Extracted {len(games)} games from listing page")
    return games
