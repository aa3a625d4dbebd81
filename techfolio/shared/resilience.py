# techfolio/shared/resilience.py
import logging

import structlog
from tenacity import (
    Retrying,
    stop_after_attempt,
    wait_random_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from techfolio.core.ports.errors import DuplicateKeyError, StaleSnapshotError

logger = structlog.get_logger()

# Retries here are for optimistic-concurrency losers, not for I/O failures:
# the wait is short and jittered so racing writers do not retry in lockstep.

def tree_commit_retrying(max_attempts: int) -> Retrying:
    """
    Retry policy for a category tree read-validate-commit cycle.

    Retries only when the repository rejected the commit because the tree
    version moved underneath us. Domain errors raised by the validation step
    propagate on the first attempt.
    """
    return Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_random_exponential(multiplier=0.005, max=0.1),
        retry=retry_if_exception_type(StaleSnapshotError),
        before_sleep=before_sleep_log(logger, logging.DEBUG),
        reraise=True,
    )

def tag_conflict_retrying(max_attempts: int) -> Retrying:
    """
    Retry policy for tag resolution.

    A concurrent resolver may insert the same normalized label between our
    lookup and our insert; the unique constraint rejects the second insert and
    the next attempt finds the winner's row.
    """
    return Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_random_exponential(multiplier=0.001, max=0.05),
        retry=retry_if_exception_type(DuplicateKeyError),
        before_sleep=before_sleep_log(logger, logging.DEBUG),
        reraise=True,
    )
