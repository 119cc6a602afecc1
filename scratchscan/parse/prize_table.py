"""Find the prize tier table on a detail page and pick the top prize."""
import logging
from dataclasses import dataclass

from selectolax.parser import HTMLParser, Node

from scratchscan.parse.normalize import parse_count, parse_currency

logger = logging.getLogger(__name__)

MIN_ROW_CELLS = 3


@dataclass(frozen=True)
class ColumnRoles:
    """Cell positions of the prize amount, in-game count and claimed count."""

    prize_amount: int = 0
    in_game: int = 1
    claimed: int = 2

    @classmethod
    def from_header(cls, header: Node | None) -> "ColumnRoles":
        """Header labels override the positional defaults."""
        roles = {"prize_amount": 0, "in_game": 1, "claimed": 2}
        if header is None:
            return cls(**roles)
        for idx, cell in enumerate(header.css("th, td")):
            text = cell.text().lower()
            if "prize" in text and "amount" in text:
                roles["prize_amount"] = idx
            elif "in game" in text:
                roles["in_game"] = idx
            elif "claimed" in text:
                roles["claimed"] = idx
        return cls(**roles)


@dataclass(frozen=True)
class PrizeTier:
    amount: float
    in_game: int
    claimed: int


@dataclass(frozen=True)
class PrizeTableResult:
    top_prize: float = 0.0
    top_prize_in_game: int = 0
    top_prize_claimed: int = 0
    prizes_found: bool = False
    tables_scanned: int = 0


def is_prize_table(table: Node) -> bool:
    """Prize tables mention "prize" and at least one of "in game" / "claimed"."""
    text = table.text().lower()
    return "prize" in text and ("in game" in text or "claimed" in text)


def _cell(cells: list[Node], index: int) -> str:
    # Roles past the end of a short row read as empty
    return cells[index].text(strip=True) if index < len(cells) else ""


def parse_prize_rows(table: Node, roles: ColumnRoles) -> list[PrizeTier]:
    """Prize tiers with a positive amount, in document order."""
    tiers = []
    for row in table.css("tr"):
        cells = row.css("td")
        if len(cells) < MIN_ROW_CELLS:
            continue
        amount = parse_currency(_cell(cells, roles.prize_amount))
        if amount <= 0:
            continue
        tiers.append(
            PrizeTier(
                amount=amount,
                in_game=parse_count(_cell(cells, roles.in_game)),
                claimed=parse_count(_cell(cells, roles.claimed)),
            )
        )
    return tiers


def resolve_prize_table(parser: HTMLParser) -> PrizeTableResult:
    """
    Scan every prize table in document order and keep the highest tier.

    Only a strictly greater amount replaces the current top prize, so the
    first tier seen wins a tie.
    """
    top: PrizeTier | None = None
    found = False
    scanned = 0

    for table in parser.css("table"):
        if not is_prize_table(table):
            continue
        scanned += 1
        roles = ColumnRoles.from_header(table.css_first("thead tr") or table.css_first("tr"))
        for tier in parse_prize_rows(table, roles):
            found = True
            if top is None or tier.amount > top.amount:
                top = tier

    if scanned == 0:
        logger.debug("No prize table found on detail page")

    if top is None:
        return PrizeTableResult(prizes_found=found, tables_scanned=scanned)
    return PrizeTableResult(
        top_prize=top.amount,
        top_prize_in_game=top.in_game,
        top_prize_claimed=top.claimed,
        prizes_found=found,
        tables_scanned=scanned,
    )
