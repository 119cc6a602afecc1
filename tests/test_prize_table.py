"""Tests for the prize table resolver."""
from selectolax.parser import HTMLParser
from scratchscan.parse.prize_table import ColumnRoles, is_prize_table, resolve_prize_table


def _resolve(html: str):
    return resolve_prize_table(HTMLParser(html))


def test_top_prize_by_amount():
    """The largest tier wins regardless of row order."""
    html = """
    <table>
      <tr><th>Prize Amount</th><th>No. in Game</th><th>No. Prizes Claimed</th></tr>
      <tr><td>$500</td><td>10</td><td>3</td></tr>
      <tr><td>$100,000</td><td>2</td><td>2</td></tr>
    </table>
    """
    result = _resolve(html)

    assert result.top_prize == 100000
    assert result.top_prize_in_game == 2
    assert result.top_prize_claimed == 2
    assert result.prizes_found is True


def test_header_reorders_columns():
    """Header labels override the default column positions."""
    html = """
    <table>
      <tr><th>No. Prizes Claimed</th><th>Prize Amount</th><th>No. in Game</th></tr>
      <tr><td>7</td><td>$1,000</td><td>20</td></tr>
      <tr><td>0</td><td>$50,000</td><td>3</td></tr>
    </table>
    """
    result = _resolve(html)

    assert result.top_prize == 50000
    assert result.top_prize_in_game == 3
    assert result.top_prize_claimed == 0


def test_column_roles_defaults_without_header():
    """No header means positions 0/1/2."""
    assert ColumnRoles.from_header(None) == ColumnRoles(0, 1, 2)


def test_tie_keeps_first_tier():
    """Equal amounts: the first row seen stays the top prize."""
    html = """
    <table>
      <tr><th>Prize Amount</th><th>No. in Game</th><th>No. Prizes Claimed</th></tr>
      <tr><td>$1,000</td><td>5</td><td>1</td></tr>
      <tr><td>$1,000</td><td>9</td><td>9</td></tr>
    </table>
    """
    result = _resolve(html)

    assert result.top_prize_in_game == 5
    assert result.top_prize_claimed == 1


def test_non_prize_table_skipped():
    """A table without "in game" or "claimed" is not a prize table."""
    html = """
    <table>
      <tr><th>Prize</th><th>Odds</th><th>Notes</th></tr>
      <tr><td>$1,000,000</td><td>1 in 2,000,000</td><td>-</td></tr>
    </table>
    """
    parser = HTMLParser(html)

    assert is_prize_table(parser.css_first("table")) is False
    result = resolve_prize_table(parser)
    assert result.prizes_found is False
    assert result.top_prize == 0


def test_global_maximum_across_tables():
    """Every prize table is scanned; the highest tier across all of them wins."""
    html = """
    <table>
      <tr><th>Prize Amount</th><th>No. in Game</th><th>No. Prizes Claimed</th></tr>
      <tr><td>$2,000</td><td>10</td><td>4</td></tr>
    </table>
    <table>
      <tr><th>Prize Amount</th><th>No. in Game</th><th>No. Prizes Claimed</th></tr>
      <tr><td>$25,000</td><td>6</td><td>5</td></tr>
    </table>
    """
    result = _resolve(html)

    assert result.top_prize == 25000
    assert result.top_prize_in_game == 6
    assert result.tables_scanned == 2


def test_short_rows_ignored():
    """Rows with fewer than three cells are not prize tiers."""
    html = """
    <table>
      <tr><th>Prize Amount</th><th>No. in Game</th><th>No. Prizes Claimed</th></tr>
      <tr><td>$9,999,999</td><td>1</td></tr>
      <tr><td>$20</td><td>100</td><td>40</td></tr>
    </table>
    """
    result = _resolve(html)

    assert result.top_prize == 20
    assert result.prizes_found is True


def test_zero_amount_rows_not_found():
    """Rows without a positive amount don't count as prizes."""
    html = """
    <table>
      <tr><td>Prize</td><td>In Game</td><td>Claimed</td></tr>
      <tr><td>TICKET</td><td>100</td><td>40</td></tr>
    </table>
    """
    assert _resolve(html).prizes_found is False


def test_role_past_row_end_reads_zero():
    """A row narrower than the header still counts; the missing cell is 0."""
    html = """
    <table>
      <tr><th>Prize Amount</th><th>No. in Game</th><th>Notes</th><th>No. Prizes Claimed</th></tr>
      <tr><td>$5,000</td><td>8</td><td>-</td></tr>
    </table>
    """
    result = _resolve(html)

    assert result.prizes_found is True
    assert result.top_prize == 5000
    assert result.top_prize_in_game == 8
    assert result.top_prize_claimed == 0


def test_amount_header_needs_prize_label():
    """Only a "prize amount" header moves the prize column."""
    html = """
    <table>
      <tr><th>Prize Amount</th><th>No. in Game</th><th>Amount Claimed</th></tr>
      <tr><td>$1,000</td><td>5</td><td>2</td></tr>
    </table>
    """
    result = _resolve(html)

    assert ColumnRoles.from_header(HTMLParser(html).css_first("tr")) == ColumnRoles(0, 1, 2)
    assert result.top_prize == 1000
    assert result.top_prize_claimed == 2
