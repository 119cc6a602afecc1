"""Exception types raised by the scraper."""


class ScratchScanError(Exception):
    """Base class for scraper errors."""


class ListingFailure(ScratchScanError):
    """The games index page could not be fetched or yielded no games. Fatal to a run."""


class DetailFailure(ScratchScanError):
    """A single detail page could not be fetched or parsed.

    Never escapes ``SnapshotRunner.fetch_detail``: it is recorded on the
    game as a failed record.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RecordStateError(ScratchScanError):
    """Illegal lifecycle transition on a GameRecord."""


class CacheError(ScratchScanError):
    """Snapshot cache could not be read or written."""
