"""Tests for the retry policy decision function."""
from datetime import timedelta

import pytest

from kapture.sync.retry_policy import Retry, Terminal, backoff_for, decide


class TestDecide:
    def test_first_failure_retries_after_two_minutes(self):
        assert decide(0, 3) == Retry(next_retry_count=1, backoff=timedelta(minutes=2))

    def test_second_failure_retries_after_four_minutes(self):
        assert decide(1, 3) == Retry(next_retry_count=2, backoff=timedelta(minutes=4))

    def test_last_allowed_attempt_is_terminal(self):
        """decide(M-1, M) exhausts the budget."""
        assert decide(2, 3) == Terminal(next_retry_count=3)

    @pytest.mark.parametrize("max_attempts", [1, 2, 5, 10])
    def test_terminal_at_budget_minus_one(self, max_attempts):
        decision = decide(max_attempts - 1, max_attempts)
        assert isinstance(decision, Terminal)
        assert decision.next_retry_count == max_attempts

    def test_single_attempt_budget_never_retries(self):
        assert isinstance(decide(0, 1), Terminal)

    def test_default_budget_is_three(self):
        assert isinstance(decide(1), Retry)
        assert isinstance(decide(2), Terminal)

    def test_negative_retry_count_rejected(self):
        with pytest.raises(ValueError):
            decide(-1, 3)

    def test_zero_budget_rejected(self):
        with pytest.raises(ValueError):
            decide(0, 0)


class TestBackoff:
    def test_exponential(self):
        assert [backoff_for(n) for n in (1, 2, 3)] == [
            timedelta(minutes=2),
            timedelta(minutes=4),
            timedelta(minutes=8),
        ]
