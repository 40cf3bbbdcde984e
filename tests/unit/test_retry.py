"""Unit tests for the backoff executor."""
import pytest

from app.services.retry import retry_with_backoff


class FlakyOperation:
    """Fails a fixed number of times, then returns a value."""

    def __init__(self, failures: int, result: str = "ok"):
        self.failures = failures
        self.result = result
        self.calls = 0
        self.errors = []

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            error = RuntimeError(f"failure {self.calls}")
            self.errors.append(error)
            raise error
        return self.result


class TestRetryWithBackoff:
    """Test retry_with_backoff."""

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, recording_sleep):
        """No delay when the first attempt succeeds."""
        operation = FlakyOperation(failures=0)

        result = await retry_with_backoff(operation, sleep=recording_sleep)

        assert result == "ok"
        assert operation.calls == 1
        assert recording_sleep.delays == []

    @pytest.mark.parametrize("failures", [1, 2])
    @pytest.mark.asyncio
    async def test_recovers_after_failures(self, recording_sleep, failures):
        """k failures produce exactly k exponential delays, then the result."""
        operation = FlakyOperation(failures=failures, result="done")

        result = await retry_with_backoff(
            operation, max_retries=3, initial_delay=1.0, sleep=recording_sleep
        )

        assert result == "done"
        assert operation.calls == failures + 1
        assert recording_sleep.delays == [1.0 * 2 ** i for i in range(failures)]

    @pytest.mark.asyncio
    async def test_raises_last_error_after_exhausting_attempts(self, recording_sleep):
        """An always-failing operation runs max_retries times and re-raises the last error."""
        operation = FlakyOperation(failures=100)

        with pytest.raises(RuntimeError) as exc_info:
            await retry_with_backoff(
                operation, max_retries=3, initial_delay=0.5, sleep=recording_sleep
            )

        assert operation.calls == 3
        assert exc_info.value is operation.errors[-1]
        assert recording_sleep.delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_custom_attempt_count(self, recording_sleep):
        """Delays keep doubling for longer retry budgets."""
        operation = FlakyOperation(failures=100)

        with pytest.raises(RuntimeError):
            await retry_with_backoff(
                operation, max_retries=5, initial_delay=0.1, sleep=recording_sleep
            )

        assert operation.calls == 5
        assert recording_sleep.delays == pytest.approx([0.1, 0.2, 0.4, 0.8])

    @pytest.mark.asyncio
    async def test_non_retriable_error_raised_immediately(self, recording_sleep):
        """should_retry=False stops after the first failure."""
        operation = FlakyOperation(failures=100)

        with pytest.raises(RuntimeError) as exc_info:
            await retry_with_backoff(
                operation,
                should_retry=lambda e: False,
                sleep=recording_sleep,
            )

        assert operation.calls == 1
        assert exc_info.value is operation.errors[0]
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_rejects_zero_attempts(self, recording_sleep):
        """At least one attempt is required."""
        with pytest.raises(ValueError):
            await retry_with_backoff(FlakyOperation(failures=0), max_retries=0)

    @pytest.mark.asyncio
    async def test_default_sleep_is_non_blocking(self):
        """The default sleep is asyncio's, so tiny delays still work end-to-end."""
        operation = FlakyOperation(failures=1)

        result = await retry_with_backoff(operation, initial_delay=0.001)

        assert result == "ok"
        assert operation.calls == 2
