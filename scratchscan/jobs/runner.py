"""Snapshot runner: index page, then detail pages in fixed-size concurrent batches."""
import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Literal, Optional

import httpx
from pydantic import BaseModel, Field

from scratchscan.config import config
from scratchscan.errors import DetailFailure, ListingFailure
from scratchscan.fetch.client import FetchClient
from scratchscan.fetch.endpoints import get_detail_url, get_listing_url
from scratchscan.jobs.metrics import Metrics
from scratchscan.jobs.metrics_exporter import MetricsExporter
from scratchscan.parse.detail import extract_detail
from scratchscan.parse.listing import extract_games
from scratchscan.parse.models import GameDetail, GameRecord, GameSummary, Progress, Snapshot
from scratchscan.store.cache import SnapshotCache

logger = logging.getLogger(__name__)

RunPhase = Literal["idle", "listing", "detailing", "done", "error"]


class SnapshotUpdate(BaseModel):
    """What a caller sees after each detail page completes."""

    run_id: str
    phase: RunPhase
    records: list[GameRecord] = Field(default_factory=list)
    progress: Progress = Field(default_factory=Progress)


class SnapshotRunner:
    """
    Runs one snapshot: fetch the listing, then every detail page.

    Detail pages are fetched ``batch_size`` at a time; the next batch starts
    only when the whole previous batch has finished. A failing detail page
    only fails its own record. Each call to ``run()`` is an independent run.
    """

    def __init__(
        self,
        batch_size: Optional[int] = None,
        timeout: Optional[float] = None,
        cache: Optional[SnapshotCache] = None,
        use_cache: bool = True,
        export_progress: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        listing_url: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self.batch_size = batch_size or config.BATCH_SIZE
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self.cache = cache if cache is not None else (SnapshotCache() if use_cache else None)
        self.export_progress = export_progress
        self.transport = transport
        self.listing_url = listing_url or get_listing_url()
        self.base_url = base_url or config.BASE_URL

        self.run_id: Optional[str] = None
        self.phase: RunPhase = "idle"
        self.metrics = Metrics(0)
        self.snapshot: Optional[Snapshot] = None
        self._records: dict[str, GameRecord] = {}
        self._lock = asyncio.Lock()
        self._client: Optional[FetchClient] = None
        self._exporter: Optional[MetricsExporter] = None

    @asynccontextmanager
    async def _client_scope(self):
        """The run's shared client, or a short-lived one outside a run."""
        if self._client is not None:
            yield self._client
            return
        async with FetchClient(timeout=self.timeout, transport=self.transport) as client:
            yield client

    async def list_games(self) -> list[GameSummary]:
        """Fetch and parse the index page. Raises ListingFailure."""
        url = self.listing_url
        logger.info(f"Fetching game list from {url}")
        try:
            async with self._client_scope() as client:
                response = await client.fetch(url)
        except httpx.HTTPError as e:
            raise ListingFailure(f"Failed to fetch game list: {e}") from e

        if not response.is_success:
            raise ListingFailure(f"Failed to fetch game list: {response.status_code}")

        games = extract_games(response.text, base_url=self.base_url)
        if not games:
            raise ListingFailure("No games returned from list page")
        return games

    async def fetch_detail_page(self, reference: str) -> GameDetail:
        """Fetch and parse one detail page. Raises DetailFailure."""
        url = get_detail_url(reference, self.base_url)
        try:
            async with self._client_scope() as client:
                response = await client.get(url)
        except httpx.TimeoutException as e:
            raise DetailFailure(f"Detail page timed out after {self.timeout:g}s") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise DetailFailure(f"Detail fetch failed: {e}") from e

        if not response.is_success:
            raise DetailFailure(f"Failed to fetch detail page: {response.status_code}", response.status_code)

        try:
            return extract_detail(response.text)
        except Exception as e:
            logger.error(f"Error parsing detail page {url}: {e}", exc_info=True)
            raise DetailFailure(f"Failed to parse detail page: {e}") from e

    async def fetch_detail(self, summary: GameSummary) -> GameRecord:
        """Fetch and parse one game's detail page. Never raises: failures come back as failed records."""
        record = GameRecord.pending(summary)
        try:
            detail = await self.fetch_detail_page(summary.detail_url)
        except DetailFailure as e:
            logger.warning(f"Game {summary.game_number}: {e}")
            return record.fail(str(e))
        except Exception as e:
            logger.error(f"Unexpected error for game {summary.game_number}: {e}", exc_info=True)
            return record.fail(f"Detail fetch failed: {e}")
        return record.resolve(detail)

    async def _merge(self, record: GameRecord) -> SnapshotUpdate:
        """Replace the record for its game number and count it as completed."""
        async with self._lock:
            current = self._records.get(record.game_number)
            if current is None:
                logger.warning(f"Ignoring result for unknown game {record.game_number}")
            elif current.is_terminal:
                logger.warning(f"Ignoring second result for game {record.game_number} ({current.status})")
            else:
                self._records[record.game_number] = record
                self.metrics.increment("completed")
                self.metrics.increment(record.status)
            return self._update()

    def _update(self) -> SnapshotUpdate:
        return SnapshotUpdate(
            run_id=self.run_id or "",
            phase=self.phase,
            records=list(self._records.values()),
            progress=self.metrics.progress(),
        )

    def _batches(self, summaries: list[GameSummary]) -> list[list[GameSummary]]:
        return [summaries[i : i + self.batch_size] for i in range(0, len(summaries), self.batch_size)]

    async def _export(self) -> None:
        if self._exporter is None:
            return
        summary = self.metrics.get_summary()
        try:
            await self._exporter.export_progress(
                phase=self.phase,
                completed=summary["completed"],
                total=summary["total"],
                resolved=summary["resolved"],
                failed=summary["failed"],
                rate=summary["rate"],
                eta=summary["eta_seconds"],
            )
        except OSError as e:
            logger.warning(f"Progress export failed: {e}")

    async def run(self) -> AsyncIterator[SnapshotUpdate]:
        """
        Yield the record collection after the listing and after every detail page.

        Raises ListingFailure if the index page fails; nothing is yielded then.
        """
        self.run_id = str(uuid.uuid4())
        self.phase = "listing"
        self.snapshot = None
        self._records = {}
        self._exporter = MetricsExporter(self.run_id) if self.export_progress else None
        logger.info(f"Run ID: {self.run_id}")

        async with FetchClient(timeout=self.timeout, transport=self.transport) as client:
            self._client = client
            try:
                try:
                    summaries = await self.list_games()
                except ListingFailure as e:
                    self.phase = "error"
                    logger.error(f"Listing failed: {e}")
                    raise

                self._records = {s.game_number: GameRecord.pending(s) for s in summaries}
                self.metrics = Metrics(len(summaries))
                self.phase = "detailing"
                yield self._update()

                for batch in self._batches(summaries):
                    tasks = [asyncio.create_task(self.fetch_detail(s)) for s in batch]
                    try:
                        for next_done in asyncio.as_completed(tasks):
                            update = await self._merge(await next_done)
                            await self._export()
                            yield update
                    finally:
                        # Caller stopped iterating mid-batch
                        for task in tasks:
                            task.cancel()
                    self.metrics.report()
            finally:
                self._client = None

        self.phase = "done"
        self.snapshot = Snapshot(records=list(self._records.values()), run_id=self.run_id)
        await self._export()
        await self._save_snapshot(self.snapshot)

        summary = self.metrics.get_summary()
        logger.info(
            f"Run {self.run_id} done: {summary['resolved']} resolved, "
            f"{summary['failed']} failed of {summary['total']} "
            f"in {summary['elapsed_seconds']:.1f}s"
        )
        yield self._update()

    async def _save_snapshot(self, snapshot: Snapshot) -> None:
        """Caching is best effort: a failure here never fails the run."""
        if self.cache is None:
            return
        try:
            await self.cache.save_snapshot(snapshot)
        except Exception as e:
            logger.warning(f"Failed to cache snapshot: {e}", exc_info=True)

    async def collect(self) -> Snapshot:
        """Run to completion and return the snapshot."""
        async for _ in self.run():
            pass
        return self.snapshot
