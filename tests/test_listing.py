"""Tests for the games index page extractor."""
import pytest
from scratchscan.parse.listing import build_detail_url, extract_games

from conftest import BASE


def test_extract_games_order_and_fields(listing_html):
    """Game rows come back in page order with typed fields."""
    games = extract_games(listing_html, base_url=BASE)

    assert [g.game_number for g in games] == ["2501", "2502", "2503"]
    first = games[0]
    assert first.game_name == "Lucky 7s"
    assert first.start_date == "01/06/25"
    assert first.ticket_price == 10
    assert first.detail_url == f"{BASE}/Games/Scratch_Offs/details.html_2501.html"


def test_extract_games_skips_prize_tier_duplicates(listing_html):
    """The prize tier row repeating a game link is dropped; the first row wins."""
    games = extract_games(listing_html, base_url=BASE)

    lucky = [g for g in games if g.game_number == "2501"]
    assert len(lucky) == 1
    assert lucky[0].game_name == "Lucky 7s"


def test_extract_games_relative_link_gets_origin(listing_html):
    """Relative links without a leading slash are prefixed with the origin."""
    games = extract_games(listing_html, base_url=BASE)
    assert games[2].detail_url == f"{BASE}/Games/Scratch_Offs/details.html_2503.html"


def test_extract_games_decorative_row_skipped():
    """A row without a detail link is not a game."""
    html = """
    <table>
      <tr><td>Notice</td><td></td><td></td><td></td><td>All prizes subject to change</td></tr>
      <tr><td><a href="/details.html_9.html">9</a></td><td>05/01/25</td><td>$1</td><td></td><td>Bingo</td></tr>
    </table>
    """
    games = extract_games(html, base_url=BASE)

    assert len(games) == 1
    assert games[0].game_number == "9"


def test_extract_games_ignores_other_links():
    """Links that don't point at a detail page don't make a game row."""
    html = """
    <table>
      <tr><td><a href="/help.html">Help</a></td><td>x</td><td>$1</td><td></td><td>Help row</td></tr>
    </table>
    """
    assert extract_games(html, base_url=BASE) == []


def test_extract_games_absolute_link_kept():
    """Absolute detail links are used as-is."""
    html = """
    <table>
      <tr><td><a href="https://cdn.lottery.test/details.html_7.html">7</a></td>
          <td>05/01/25</td><td>$3</td><td></td><td>Sevens</td></tr>
    </table>
    """
    games = extract_games(html, base_url=BASE)
    assert games[0].detail_url == "https://cdn.lottery.test/details.html_7.html"


def test_extract_games_header_fallback():
    """A different column layout is read through the header labels."""
    html = """
    <table>
      <tr><th>Game #</th><th>Game Name</th><th>Price</th><th>Start Date</th></tr>
      <tr><td><a href="/details.html_1.html">1</a></td><td>Alpha</td><td>$2</td><td>03/01/25</td></tr>
    </table>
    """
    games = extract_games(html, base_url=BASE)

    assert len(games) == 1
    assert games[0].game_name == "Alpha"
    assert games[0].ticket_price == 2
    assert games[0].start_date == "03/01/25"


def test_extract_games_empty():
    """Test empty HTML."""
    assert extract_games("", base_url=BASE) == []
    assert extract_games("<html><body>No games</body></html>", base_url=BASE) == []


@pytest.mark.parametrize(
    "href,expected",
    [
        ("/a/details.html", "https://x.test/a/details.html"),
        ("a/details.html", "https://x.test/a/details.html"),
        ("https://y.test/details.html", "https://y.test/details.html"),
    ],
)
def test_build_detail_url(href, expected):
    """Test detail URL resolution."""
    assert build_detail_url(href, "https://x.test/") == expected


def test_extract_games_short_row_without_header_skipped():
    """Rows under five cells are skipped unless a header names the columns."""
    html = """
    <table>
      <tr><td><a href="/details.html_4.html">4</a></td><td>05/01/25</td><td>$2</td></tr>
      <tr><td><a href="/details.html_5.html">5</a></td><td>05/01/25</td><td>$2</td><td></td><td>Fives</td></tr>
    </table>
    """
    games = extract_games(html, base_url=BASE)

    assert [g.game_number for g in games] == ["5"]
