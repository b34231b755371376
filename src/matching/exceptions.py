"""Matching engine exceptions for Talent Match."""


class MatchingError(Exception):
    """Base exception for matching and ranking errors."""

    pass


class NotFoundError(MatchingError):
    """Raised when a job, candidate or application id does not resolve."""

    def __init__(self, kind: str, identity: str):
        self.kind = kind
        self.identity = identity
        super().__init__(f"{kind} not found: {identity}")


class InvalidInputError(MatchingError):
    """Raised by parsing helpers for malformed times or dates.

    Scorers recover from this locally; it never escapes a ranking pass.
    """

    def __init__(self, value: object, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid input {value!r}: {reason}")


class ScoringError(MatchingError):
    """Raised when scoring a single (job, candidate) pair fails unexpectedly."""

    def __init__(self, job_id: str, candidate_id: str):
        self.job_id = job_id
        self.candidate_id = candidate_id
        super().__init__(f"Failed to score job {job_id} against candidate {candidate_id}")


class CacheWriteError(MatchingError):
    """Raised when a ranking could not be persisted.

    The computed entries are kept on the exception so the caller can retry
    the write without recomputing the ranking.
    """

    def __init__(self, key: str, entries: list):
        self.key = key
        self.entries = entries
        super().__init__(f"Failed to write match cache for {key}")


class RankingTimeoutError(MatchingError):
    """Raised when a ranking scan runs past the caller's deadline."""

    def __init__(self, key: str, timeout: float, scanned: int):
        self.key = key
        self.timeout = timeout
        self.scanned = scanned
        super().__init__(
            f"Ranking for {key} exceeded {timeout:.1f}s after scanning {scanned} records"
        )


class WeightsConfigError(MatchingError):
    """Raised when a weight set is missing or invalid."""

    pass
