from __future__ import annotations


class NewsAggError(Exception):
    """Base class for aggregation pipeline errors."""


class RetrievalFailure(NewsAggError):
    def __init__(self, source: str, reasons: list[str]) -> None:
        self.source = source
        self.reasons = reasons
        super().__init__(f"{source}: all attempts failed ({'; '.join(reasons)})")


class ParseFailure(NewsAggError):
    pass


class ValidationRejection(NewsAggError):
    pass


class BlockedHostError(ValidationRejection):
    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Blocked target {url!r}: {reason}")


class TotalAggregationFailure(NewsAggError):
    def __init__(self, attempted: int, failures: dict[str, str]) -> None:
        self.attempted = attempted
        self.failures = failures
        super().__init__(f"All {attempted} sources failed to yield content")
