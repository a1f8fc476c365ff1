import pytest

from src.gym_attendance.gym_attendance.common.retry import NO_RETRY, RetryPolicy
from src.gym_attendance.gym_attendance.core.exceptions import StorageError, TransientStorageError


class Flaky:
    def __init__(self, failures, exc=TransientStorageError):
        self.failures = failures
        self.exc = exc
        self.calls = 0

    def __call__(self, value):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc("lock wait timeout")
        return value


def test_retries_once_with_backoff():
    sleeps = []
    fn = Flaky(1)
    policy = RetryPolicy(attempts=2, backoff_seconds=0.5, sleep=sleeps.append)

    assert policy.run(fn, "ok") == "ok"
    assert fn.calls == 2
    assert sleeps == [0.5]


def test_backoff_doubles():
    sleeps = []
    policy = RetryPolicy(attempts=3, backoff_seconds=0.1, sleep=sleeps.append)

    assert policy.run(Flaky(2), 7) == 7
    assert sleeps == [0.1, 0.2]


def test_gives_up_after_attempts():
    fn = Flaky(5)
    with pytest.raises(TransientStorageError):
        RetryPolicy(attempts=2, backoff_seconds=0, sleep=lambda s: None).run(fn, 1)
    assert fn.calls == 2


def test_permanent_errors_are_not_retried():
    fn = Flaky(1, exc=StorageError)
    with pytest.raises(StorageError):
        RetryPolicy(sleep=lambda s: None).run(fn, 1)
    assert fn.calls == 1


def test_no_retry():
    fn = Flaky(1)
    with pytest.raises(TransientStorageError):
        NO_RETRY.run(fn, 1)
    assert fn.calls == 1
