"""
Tests for retry policies and the network backoff helper.
"""

import pytest
from unittest.mock import Mock, AsyncMock, patch

from ton_keystore.recovery.retry import (
    ExponentialBackoff, FixedBackoff, MaxRetriesExceeded,
    backoff, create_network_retry_policy
)
from ton_keystore.runtime.errors import (
    AuthenticationFailedError, NetworkError, NetworkUnavailableError
)


def no_delay(max_attempts=3):
    return ExponentialBackoff(max_attempts=max_attempts, base_delay=0.0, max_delay=0.0, jitter=False)


class TestRetryPolicies:
    """Test retry policy implementations."""

    def test_exponential_backoff_calculation(self):
        """Test exponential backoff delay calculation."""
        policy = ExponentialBackoff(base_delay=0.5, factor=2.0, max_delay=8.0, jitter=False)

        assert policy.calculate_delay(1) == 0.5
        assert policy.calculate_delay(2) == 1.0
        assert policy.calculate_delay(3) == 2.0
        assert policy.calculate_delay(6) == 8.0

    def test_fixed_backoff_calculation(self):
        policy = FixedBackoff(delay=2.0, jitter=False)
        assert policy.calculate_delay(1) == policy.calculate_delay(3) == 2.0

    def test_network_policy_defaults(self):
        policy = create_network_retry_policy()
        assert policy.max_attempts == 5
        assert policy.base_delay == 0.5
        assert policy.max_delay == 8.0

    def test_jitter_bounds(self):
        policy = ExponentialBackoff(jitter=True, jitter_factor=0.1)
        for _ in range(20):
            assert 0.95 <= policy.add_jitter(1.0) <= 1.05

    def test_invalid_attempts(self):
        with pytest.raises(ValueError):
            ExponentialBackoff(max_attempts=0)

    @pytest.mark.asyncio
    async def test_successful_execution_no_retry(self):
        """Test successful execution without retries."""
        policy = no_delay()

        result = await policy.execute(Mock(return_value=7))
        assert result == 7
        assert policy.total_attempts == 1
        assert policy.total_retries == 0

    @pytest.mark.asyncio
    async def test_retry_on_network_error(self):
        """Test transient network errors are retried."""
        policy = no_delay()
        func = AsyncMock(side_effect=[NetworkError("reset"), NetworkError("reset"), "ok"])

        assert await policy.execute(func) == "ok"
        assert func.await_count == 3
        assert policy.total_retries == 2
        assert len(policy.last_attempts) == 3
        assert [a.exception is not None for a in policy.last_attempts] == [True, True, False]

    @pytest.mark.asyncio
    async def test_max_retries_exceeded(self):
        policy = no_delay(max_attempts=2)
        func = Mock(side_effect=NetworkError("reset"))

        with pytest.raises(MaxRetriesExceeded) as exc:
            await policy.execute(func)
        assert exc.value.attempts == 2
        assert func.call_count == 2

    @pytest.mark.asyncio
    async def test_keystore_errors_not_retried(self):
        """Test a non-network keystore error propagates on the first attempt."""
        policy = no_delay()
        func = Mock(side_effect=AuthenticationFailedError())

        with pytest.raises(AuthenticationFailedError):
            await policy.execute(func)
        assert func.call_count == 1

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self):
        """Test an exception that is not a NetworkError propagates on the first attempt."""
        policy = no_delay()
        func = Mock(side_effect=TypeError("bad response shape"))

        with pytest.raises(TypeError):
            await policy.execute(func)
        assert func.call_count == 1
        assert policy.total_retries == 0

    @pytest.mark.asyncio
    async def test_delays_are_slept(self):
        policy = ExponentialBackoff(max_attempts=3, base_delay=0.5, jitter=False)
        func = Mock(side_effect=[NetworkError("reset"), NetworkError("reset"), "ok"])

        with patch("ton_keystore.recovery.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            assert await policy.execute(func) == "ok"
        assert [call.args[0] for call in sleep.await_args_list] == [0.5, 1.0]


class TestBackoffHelper:
    """Test the backoff helper used by workflows."""

    @pytest.mark.asyncio
    async def test_passes_arguments(self):
        func = Mock(return_value=5)
        assert await backoff(func, "a", key="b", policy=no_delay()) == 5
        func.assert_called_once_with("a", key="b")

    @pytest.mark.asyncio
    async def test_exhaustion_is_network_unavailable(self):
        """Test exhausted retries surface as NetworkUnavailableError."""
        last = NetworkError("still down")
        func = Mock(side_effect=[NetworkError("down"), last])

        with pytest.raises(NetworkUnavailableError) as exc:
            await backoff(func, policy=no_delay(max_attempts=2))
        assert exc.value.cause is last
        assert exc.value.details == {"attempts": 2}

    @pytest.mark.asyncio
    async def test_programming_error_is_not_network_unavailable(self):
        """Test a bug in the called function surfaces as itself."""
        func = Mock(side_effect=AttributeError("'NoneType' object has no attribute 'get'"))

        with pytest.raises(AttributeError):
            await backoff(func, policy=no_delay(max_attempts=4))
        assert func.call_count == 1
