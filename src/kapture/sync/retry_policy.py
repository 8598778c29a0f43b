"""
Retry policy for failed deliveries.

Pure function of the attempt history: each failed attempt bumps the retry
count; once the bumped count reaches the attempt budget the entry is
terminal. Backoff doubles per attempt (2, 4, 8... minutes) and is advisory;
the dispatch loop runs whenever connectivity allows, not on a timer.
"""
from dataclasses import dataclass
from datetime import timedelta
from typing import Union

DEFAULT_MAX_ATTEMPTS = 3


@dataclass(frozen=True)
class Retry:
    next_retry_count: int
    backoff: timedelta


@dataclass(frozen=True)
class Terminal:
    next_retry_count: int


Decision = Union[Retry, Terminal]


def backoff_for(retry_count: int) -> timedelta:
    """Exponential backoff: 2^retry_count minutes."""
    return timedelta(minutes=2 ** retry_count)


def decide(current_retry_count: int, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> Decision:
    """Decide what happens after a failed delivery attempt.

    Args:
        current_retry_count: The entry's retry_count before this failure.
        max_attempts: Attempt budget M.

    Returns:
        Retry(next, backoff) while next < M, otherwise Terminal(next).
    """
    if current_retry_count < 0:
        raise ValueError(f"retry count must be non-negative, got {current_retry_count}")
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    next_count = current_retry_count + 1
    if next_count >= max_attempts:
        return Terminal(next_retry_count=next_count)
    return Retry(next_retry_count=next_count, backoff=backoff_for(next_count))
