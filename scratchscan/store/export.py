"""Spreadsheet export of resolved games."""
import logging
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Iterable, Union

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from scratchscan.parse.models import GameRecord

logger = logging.getLogger(__name__)

SHEET_TITLE = "TX Lottery Games"
DEFAULT_FILENAME = "texas-lottery-comparison.xlsx"
CURRENCY_FORMAT = "$#,##0.00"

# (header, width, value getter, currency)
COLUMNS = [
    ("Game #", 8, lambda g: g.summary.game_number, False),
    ("Game Name", 30, lambda g: g.summary.game_name, False),
    ("Start Date", 12, lambda g: g.summary.start_date, False),
    ("Ticket Price", 12, lambda g: g.summary.ticket_price, True),
    ("Pack Size", 10, lambda g: g.detail.pack_size, False),
    ("Guaranteed Total Prize Amount", 28, lambda g: g.detail.guaranteed_prize_amount, True),
    ("Pack Cost", 12, lambda g: g.pack_cost, True),
    ("Max Loss (Guaranteed)", 18, lambda g: g.max_loss, True),
    ("Top Prize", 14, lambda g: g.detail.top_prize, True),
    ("Top Prizes Remaining", 18, lambda g: g.top_prizes_remaining, False),
    ("Total Tickets", 14, lambda g: g.detail.total_tickets, False),
    ("Overall Odds", 16, lambda g: g.detail.overall_odds, False),
]

HEADERS = [col[0] for col in COLUMNS]


def build_workbook(records: Iterable[GameRecord]) -> Workbook:
    """One sheet, bold header row, currency format on the dollar columns. Only resolved games."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append(HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    rows = 0
    for record in records:
        if record.status != "resolved":
            continue
        ws.append([getter(record) for _, _, getter, _ in COLUMNS])
        rows += 1

    for idx, (_, width, _, currency) in enumerate(COLUMNS, start=1):
        letter = get_column_letter(idx)
        ws.column_dimensions[letter].width = width
        if currency:
            for row in range(2, rows + 2):
                ws[f"{letter}{row}"].number_format = CURRENCY_FORMAT

    logger.debug(f"Built workbook with {rows} games")
    return wb


def export_xlsx(records: Iterable[GameRecord], target: Union[str, Path, BinaryIO] = DEFAULT_FILENAME) -> None:
    """Write resolved games to an .xlsx file path or binary stream."""
    wb = build_workbook(records)
    wb.save(target)
    if isinstance(target, (str, Path)):
        logger.info(f"Exported games to {target}")


def export_xlsx_bytes(records: Iterable[GameRecord]) -> bytes:
    buffer = BytesIO()
    export_xlsx(records, buffer)
    return buffer.getvalue()
