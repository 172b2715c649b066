# Overview: Pytest coverage for shift locking and retry of conflicting writes.

import pytest
from sqlalchemy.orm.exc import StaleDataError

from posgo.services import shift_service
from posgo.services.concurrency import lock_open_shift, run_with_retry
from posgo.validation import ValidationError


def test_lock_open_shift(open_shift):
    assert lock_open_shift(open_shift.id).id == open_shift.id
    assert lock_open_shift(999) is None

    shift_service.close_shift(100)
    assert lock_open_shift(open_shift.id) is None


def test_retries_version_conflicts_then_succeeds(db_session):
    calls = []

    def _op():
        calls.append(1)
        if len(calls) < 3:
            raise StaleDataError("version mismatch")
        return "done"

    assert run_with_retry(_op, backoff_base=0) == "done"
    assert len(calls) == 3


def test_gives_up_after_attempts(db_session):
    calls = []

    def _op():
        calls.append(1)
        raise StaleDataError("version mismatch")

    with pytest.raises(StaleDataError):
        run_with_retry(_op, attempts=2, backoff_base=0)
    assert len(calls) == 2


def test_business_errors_are_not_retried(db_session):
    calls = []

    def _op():
        calls.append(1)
        raise ValidationError("bad amount")

    with pytest.raises(ValidationError):
        run_with_retry(_op, backoff_base=0)
    assert len(calls) == 1
