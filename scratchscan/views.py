"""Sorting and filtering of snapshot records for the CLI and the API."""
import logging
from datetime import date, datetime
from typing import Iterable, Optional

from scratchscan.parse.models import GameRecord

logger = logging.getLogger(__name__)

DEFAULT_SORT = "ticket_price"

# Start dates on the index page are printed as MM/DD/YY
DATE_FORMATS = [
    "%m/%d/%y",
    "%m/%d/%Y",
    "%Y-%m-%d",
]

SORTABLE_FIELDS = {
    "game_number",
    "game_name",
    "start_date",
    "ticket_price",
    "pack_size",
    "guaranteed_prize_amount",
    "pack_cost",
    "max_loss",
    "max_loss_percent",
    "top_prize",
    "top_prizes_remaining",
    "total_tickets",
    "overall_odds",
    "status",
}


def parse_start_date(text: str) -> Optional[date]:
    """Start date as a date, or None when the page text doesn't parse."""
    if not text:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text.strip(), fmt).date()
        except ValueError:
            continue
    return None


def _sort_key(value):
    # Numbers before strings so mixed columns still compare
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value, "")
    if value is None:
        return (1, 0, "")
    return (1, 0, str(value).lower())


def sort_records(records: Iterable[GameRecord], field: str = DEFAULT_SORT, descending: bool = False) -> list[GameRecord]:
    """Stable sort on a raw or computed field."""
    if field not in SORTABLE_FIELDS:
        raise ValueError(f"Cannot sort by {field!r}; choose one of {', '.join(sorted(SORTABLE_FIELDS))}")
    if field == "start_date":
        def key(record: GameRecord):
            parsed = parse_start_date(record.summary.start_date)
            return (0, parsed.toordinal(), "") if parsed else _sort_key(record.summary.start_date)
    else:
        def key(record: GameRecord):
            return _sort_key(record.as_row()[field])
    return sorted(records, key=key, reverse=descending)


def filter_records(
    records: Iterable[GameRecord],
    min_date: Optional[date] = None,
    prices: Optional[Iterable[float]] = None,
) -> list[GameRecord]:
    """
    Keep games started on/after min_date and priced at one of prices.

    Games whose start date doesn't parse are kept.
    """
    price_set = {float(p) for p in prices} if prices else None
    kept = []
    for record in records:
        if price_set is not None and record.summary.ticket_price not in price_set:
            continue
        if min_date is not None:
            started = parse_start_date(record.summary.start_date)
            if started is not None and started < min_date:
                continue
        kept.append(record)
    return kept
