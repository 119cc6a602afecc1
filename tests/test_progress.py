"""Tests for run metrics, progress export and rate limiting."""
import orjson

from scratchscan.fetch.rate_limit import RateLimiter
from scratchscan.jobs.metrics import Metrics
from scratchscan.jobs.metrics_exporter import MetricsExporter


def test_metrics_counts():
    """Completed and per-status counters feed progress and the summary."""
    metrics = Metrics(4)
    metrics.increment("completed")
    metrics.increment("resolved")
    metrics.increment("completed")
    metrics.increment("failed")

    progress = metrics.progress()
    assert (progress.current, progress.total) == (2, 4)
    summary = metrics.get_summary()
    assert (summary["completed"], summary["resolved"], summary["failed"]) == (2, 1, 1)


def test_metrics_eta_without_progress():
    """No completions means no estimate."""
    metrics = Metrics(10)
    assert metrics.get_eta() == 0.0
    assert metrics.format_eta() == "0s"


async def test_exporter_appends_lines(tmp_path):
    """One JSON line per update."""
    target = tmp_path / "progress.jsonl"
    exporter = MetricsExporter("run-1", metrics_file=target)

    await exporter.export_progress("detailing", 1, 3, 1, 0, 2.5, 0.8)
    await exporter.export_progress("done", 3, 3, 2, 1, 2.0, 0.0)

    lines = [orjson.loads(line) for line in target.read_bytes().splitlines()]
    assert [line["phase"] for line in lines] == ["detailing", "done"]
    assert lines[1]["failed"] == 1
    assert lines[0]["run_id"] == "run-1"


async def test_rate_limiter_disabled_at_zero():
    """Rate 0 never waits."""
    limiter = RateLimiter(0)

    assert limiter.enabled is False
    assert await limiter.acquire("https://lottery.test/a") == 0.0


async def test_rate_limiter_spaces_same_origin():
    """Second request to an origin waits; another origin doesn't."""
    limiter = RateLimiter(20)

    assert await limiter.acquire("https://lottery.test/a") == 0.0
    assert await limiter.acquire("https://lottery.test/b") > 0
    assert await limiter.acquire("https://other.test/") == 0.0


def test_origin():
    """Scheme and host only."""
    assert RateLimiter.origin("https://lottery.test/Games/x.html?y=1") == "https://lottery.test"
