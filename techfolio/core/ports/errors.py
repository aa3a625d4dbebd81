# techfolio/core/ports/errors.py
"""
Signals raised by repository adapters.

These are not domain errors: they tell a use case that an optimistic write
lost a race, so it can re-read and retry. Use cases translate them into
`ConflictError` once retries are exhausted.
"""


class RepositoryError(Exception):
    """Base class for errors raised at the storage boundary."""


class DuplicateKeyError(RepositoryError):
    """A uniqueness constraint rejected the write."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Duplicate key: {key!r}")


class StaleSnapshotError(RepositoryError):
    """The category tree changed since the snapshot the commit was built on."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Tree version is {actual}, commit expected {expected}")
