# This project was developed with assistance from AI tools.
"""Rate data error taxonomy.

Only ``AllSourcesExhaustedError`` is ever surfaced to a user. The others
are raised inside a single fallback step or cache read and absorbed there.
"""


class RateDataError(Exception):
    """Base class for failures while acquiring rate or property data."""


class LocationMissingError(RateDataError):
    """State or county is missing, so no fetch may be attempted."""


class SourceUnavailableError(RateDataError):
    """One fallback step failed; the next step is tried."""


class InvalidRateValueError(SourceUnavailableError):
    """A fetched rate fell outside its sanity band and was rejected."""


class MalformedCacheEntryError(RateDataError):
    """The cache slot held something that could not be parsed."""


class AllSourcesExhaustedError(RateDataError):
    """Every fallback step failed."""

    def __init__(self, failures: list[str]):
        self.failures = failures
        detail = "; ".join(failures) if failures else "no sources configured"
        super().__init__(f"All rate sources failed: {detail}")
