"""Data models for scraped games."""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from scratchscan.errors import RecordStateError
from scratchscan.parse.normalize import NOT_AVAILABLE

RecordStatus = Literal["pending", "resolved", "failed"]


class GameSummary(BaseModel):
    """One game row from the games index page."""

    model_config = ConfigDict(frozen=True)

    game_number: str = Field(..., min_length=1, description="Game number (unique per listing)")
    game_name: str = Field(..., min_length=1)
    start_date: str = Field(default="", description="As printed on the index page, may be unparseable")
    ticket_price: float = Field(default=0.0, ge=0)
    detail_url: str = Field(..., description="Absolute URL of the game detail page")


class GameDetail(BaseModel):
    """Fields derived from one game detail page. 0 / "N/A" mean not found."""

    model_config = ConfigDict(frozen=True)

    pack_size: int = Field(default=0, ge=0)
    guaranteed_prize_amount: float = Field(default=0.0, ge=0)
    total_tickets: int = Field(default=0, ge=0)
    overall_odds: str = Field(default=NOT_AVAILABLE)
    top_prize: float = Field(default=0.0, ge=0)
    top_prize_in_game: int = Field(default=0, ge=0)
    top_prize_claimed: int = Field(default=0, ge=0)
    prizes_found: bool = False


class GameRecord(BaseModel):
    """A listed game joined with its detail, plus computed comparison fields.

    Lifecycle: pending -> resolved | failed. Both end states are terminal.
    """

    summary: GameSummary
    detail: GameDetail = Field(default_factory=GameDetail)
    status: RecordStatus = "pending"
    error_message: Optional[str] = None

    @classmethod
    def pending(cls, summary: GameSummary) -> "GameRecord":
        return cls(summary=summary)

    def resolve(self, detail: GameDetail) -> "GameRecord":
        """Return the resolved copy of this record."""
        self._check_pending("resolve")
        return self.model_copy(update={"detail": detail, "status": "resolved", "error_message": None})

    def fail(self, message: str) -> "GameRecord":
        """Return the failed copy of this record; detail fields stay defaulted."""
        self._check_pending("fail")
        return self.model_copy(
            update={"detail": GameDetail(), "status": "failed", "error_message": message or "Failed"}
        )

    def _check_pending(self, action: str) -> None:
        if self.status != "pending":
            raise RecordStateError(
                f"Cannot {action} game {self.summary.game_number}: already {self.status}"
            )

    @property
    def game_number(self) -> str:
        return self.summary.game_number

    @property
    def is_terminal(self) -> bool:
        return self.status in ("resolved", "failed")

    # Computed fields, always derived from summary + detail

    @property
    def pack_cost(self) -> float:
        return self.summary.ticket_price * self.detail.pack_size

    @property
    def max_loss(self) -> float:
        """Negative means buying the whole pack is a guaranteed net loss."""
        return self.detail.guaranteed_prize_amount - self.pack_cost

    @property
    def max_loss_percent(self) -> float:
        pack_cost = self.pack_cost
        if pack_cost <= 0:
            return 0.0
        return abs(self.max_loss) / pack_cost * 100

    @property
    def top_prizes_remaining(self) -> int:
        return max(0, self.detail.top_prize_in_game - self.detail.top_prize_claimed)

    @property
    def guaranteed_return(self) -> bool:
        """Pack returns at least its face value."""
        return self.status == "resolved" and self.pack_cost > 0 and self.max_loss >= 0

    @property
    def sold_out_top_prizes(self) -> bool:
        return self.status == "resolved" and self.detail.prizes_found and self.top_prizes_remaining == 0

    def as_row(self) -> dict:
        """Flat dict of raw and computed fields (API payloads, sorting)."""
        return {
            **self.summary.model_dump(),
            **self.detail.model_dump(),
            "pack_cost": self.pack_cost,
            "max_loss": self.max_loss,
            "max_loss_percent": self.max_loss_percent,
            "top_prizes_remaining": self.top_prizes_remaining,
            "status": self.status,
            "error_message": self.error_message,
        }


class Progress(BaseModel):
    """Completed / total detail fetches for a run."""

    current: int = 0
    total: int = 0


class Snapshot(BaseModel):
    """All records of one run, in listing order."""

    records: list[GameRecord] = Field(default_factory=list)
    fetched_at: datetime = Field(default_factory=datetime.utcnow)
    run_id: Optional[str] = None

    @property
    def resolved(self) -> list[GameRecord]:
        return [r for r in self.records if r.status == "resolved"]

    @property
    def failed(self) -> list[GameRecord]:
        return [r for r in self.records if r.status == "failed"]

    @property
    def progress(self) -> Progress:
        return Progress(current=sum(1 for r in self.records if r.is_terminal), total=len(self.records))
