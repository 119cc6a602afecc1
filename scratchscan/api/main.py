"""FastAPI main application."""
import asyncio
import logging
from datetime import date, datetime
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from fastapi.security import APIKeyHeader
from pydantic import BaseModel

from scratchscan.config import config
from scratchscan.errors import CacheError, DetailFailure, ListingFailure
from scratchscan.jobs.runner import SnapshotRunner
from scratchscan.logging_conf import setup_logging
from scratchscan.store.cache import SnapshotCache, format_time_ago, is_stale
from scratchscan.store.export import DEFAULT_FILENAME, export_xlsx_bytes
from scratchscan.views import DEFAULT_SORT, filter_records, sort_records

logger = logging.getLogger(__name__)

app = FastAPI(title="Scratch-off Analyzer API", version="0.1.0")

# API Key security (if configured)
API_KEY_HEADER = APIKeyHeader(name="X-API-KEY", auto_error=False)


def verify_api_key(api_key: str = Depends(API_KEY_HEADER)) -> bool:
    """Verify API key if configured."""
    expected_key = config.API_KEY
    if expected_key:
        if not api_key or api_key != expected_key:
            raise HTTPException(status_code=403, detail="Invalid API key")
    return True


# Initialize components
cache = SnapshotCache()


def make_runner() -> SnapshotRunner:
    return SnapshotRunner(cache=cache)


class RunState:
    """The refresh currently in flight, if any."""

    runner: Optional[SnapshotRunner] = None
    task: Optional[asyncio.Task] = None
    error: Optional[str] = None

    @classmethod
    def in_flight(cls) -> bool:
        return cls.task is not None and not cls.task.done()


class RefreshResponse(BaseModel):
    run_id: Optional[str] = None
    status: str
    message: str


@app.on_event("startup")
async def startup():
    """Initialize on startup."""
    setup_logging()
    try:
        await cache.initialize()
    except CacheError as e:
        logger.warning(f"Cache unavailable, continuing without it: {e}")


@app.get("/health")
async def health():
    """Health check endpoint (no auth required)."""
    return {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "refreshing": RunState.in_flight(),
    }


@app.get("/games")
async def get_games(_: bool = Depends(verify_api_key)):
    """Games from the index page, without details."""
    try:
        games = await make_runner().list_games()
    except ListingFailure as e:
        logger.error(f"get-games error: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})
    return {"games": [g.model_dump() for g in games], "total": len(games)}


@app.get("/game-detail")
async def get_game_detail(url: Optional[str] = None, _: bool = Depends(verify_api_key)):
    """Fields parsed from one detail page."""
    if not url:
        return JSONResponse(status_code=400, content={"error": "Missing url parameter"})
    try:
        detail = await make_runner().fetch_detail_page(url)
    except DetailFailure as e:
        logger.error(f"get-game-detail error: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})
    return detail.model_dump()


@app.get("/snapshot")
async def get_snapshot(
    sort: str = DEFAULT_SORT,
    desc: bool = False,
    min_date: Optional[date] = None,
    price: Optional[list[float]] = Query(default=None),
    _: bool = Depends(verify_api_key),
):
    """Last cached snapshot, filtered and sorted."""
    try:
        snapshot = await cache.load_snapshot()
    except CacheError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No snapshot cached yet")

    records = filter_records(snapshot.records, min_date=min_date, prices=price)
    try:
        records = sort_records(records, field=sort, descending=desc)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "run_id": snapshot.run_id,
        "fetched_at": snapshot.fetched_at.isoformat(),
        "last_updated": format_time_ago(snapshot.fetched_at),
        "stale": is_stale(snapshot.fetched_at),
        "total": len(snapshot.records),
        "resolved": len(snapshot.resolved),
        "failed": len(snapshot.failed),
        "games": [r.as_row() for r in records],
    }


async def _run_refresh(runner: SnapshotRunner) -> None:
    try:
        await runner.collect()
        RunState.error = None
    except ListingFailure as e:
        logger.error(f"Refresh failed: {e}")
        RunState.error = str(e)
    except Exception as e:
        logger.error(f"Refresh failed: {e}", exc_info=True)
        runner.phase = "error"
        RunState.error = str(e) or e.__class__.__name__


@app.post("/refresh", response_model=RefreshResponse, status_code=202)
async def refresh(_: bool = Depends(verify_api_key)):
    """Start a new snapshot run in the background."""
    if RunState.in_flight():
        raise HTTPException(status_code=409, detail="A refresh is already running")

    runner = make_runner()
    RunState.runner = runner
    RunState.error = None
    RunState.task = asyncio.create_task(_run_refresh(runner))
    return RefreshResponse(status="started", message="Refresh started")


@app.get("/progress")
async def progress(_: bool = Depends(verify_api_key)):
    """Phase and completed/total of the latest refresh."""
    runner = RunState.runner
    if runner is None:
        return {"phase": "idle", "current": 0, "total": 0, "error": None}
    current = runner.metrics.progress()
    return {
        "run_id": runner.run_id,
        "phase": runner.phase,
        "current": current.current,
        "total": current.total,
        "error": RunState.error,
    }


@app.get("/export.xlsx")
async def export(_: bool = Depends(verify_api_key)):
    """Resolved games of the cached snapshot as a spreadsheet."""
    try:
        snapshot = await cache.load_snapshot()
    except CacheError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No snapshot cached yet")

    return Response(
        content=export_xlsx_bytes(snapshot.records),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{DEFAULT_FILENAME}"'},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
