"""Shared HTML fixtures and helpers."""
import httpx
import pytest

from scratchscan.parse.models import GameDetail, GameRecord, GameSummary

BASE = "https://lottery.test"
LISTING_URL = f"{BASE}/Games/Scratch_Offs/all.html"

LISTING_HTML = """
<html><body>
<table>
  <thead>
    <tr><th>Game Number</th><th>Start Date</th><th>Ticket Price</th><th></th><th>Game Name</th></tr>
  </thead>
  <tbody>
    <tr><td colspan="5">Prizes remaining as of 10/01/25</td></tr>
    <tr>
      <td><a href="/Games/Scratch_Offs/details.html_2501.html">2501</a></td>
      <td>01/06/25</td><td>$10</td><td></td><td>Lucky 7s</td>
    </tr>
    <tr>
      <td><a href="/Games/Scratch_Offs/details.html_2501.html">2501</a></td>
      <td></td><td>$100,000</td><td>4</td><td>*</td>
    </tr>
    <tr>
      <td><a href="/Games/Scratch_Offs/details.html_2502.html">2502</a></td>
      <td>11/18/24</td><td>$5</td><td></td><td>Cash Blast</td>
    </tr>
    <tr>
      <td><a href="Games/Scratch_Offs/details.html_2503.html">2503</a></td>
      <td>02/03/25</td><td>$20</td><td></td><td>Diamond Millions</td>
    </tr>
  </tbody>
</table>
</body></html>
"""

DETAIL_HTML = """
<html><body>
<h1>Lucky 7s</h1>
<p>Overall odds of winning any prize in Lucky 7s are 1 in 4.33.</p>
<table class="game-info">
  <tr><td>Pack Size:</td><td>50</td></tr>
  <tr><td>Guaranteed Total Prize Amount = $300</td></tr>
</table>
<p>There are approximately 7,200,000* tickets in Lucky 7s.</p>
<table>
  <thead>
    <tr><th>Prize Amount</th><th>No. in Game*</th><th>No. Prizes Claimed</th></tr>
  </thead>
  <tbody>
    <tr><td>$10</td><td>500,000</td><td>120,000</td></tr>
    <tr><td>$100,000</td><td>4</td><td>1</td></tr>
    <tr><td>$500</td><td>900</td><td>350</td></tr>
  </tbody>
</table>
</body></html>
"""


def make_summary(number: str = "2501", price: float = 10.0, start_date: str = "01/06/25", name: str = "Lucky 7s") -> GameSummary:
    return GameSummary(
        game_number=number,
        game_name=name,
        start_date=start_date,
        ticket_price=price,
        detail_url=f"{BASE}/Games/Scratch_Offs/details.html_{number}.html",
    )


def make_resolved(number: str = "2501", price: float = 10.0, start_date: str = "01/06/25", **detail) -> GameRecord:
    fields = {
        "pack_size": 50,
        "guaranteed_prize_amount": 300.0,
        "total_tickets": 7_200_000,
        "overall_odds": "1 in 4.33",
        "top_prize": 100_000.0,
        "top_prize_in_game": 4,
        "top_prize_claimed": 1,
        "prizes_found": True,
    }
    fields.update(detail)
    return GameRecord.pending(make_summary(number, price, start_date)).resolve(GameDetail(**fields))


def site_transport(pages: dict[str, str], failures: dict[str, object] | None = None) -> httpx.MockTransport:
    """Serve pages by URL path. failures maps a path to a status code or an exception."""
    failures = failures or {}

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        failure = failures.get(path)
        if isinstance(failure, int):
            return httpx.Response(failure, text="error")
        if isinstance(failure, type) and issubclass(failure, Exception):
            raise failure("boom", request=request)
        if path in pages:
            return httpx.Response(200, text=pages[path])
        return httpx.Response(404, text="not found")

    return httpx.MockTransport(handler)


@pytest.fixture
def listing_html() -> str:
    return LISTING_HTML


@pytest.fixture
def detail_html() -> str:
    return DETAIL_HTML
