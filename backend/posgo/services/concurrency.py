# Overview: Locking and retry helpers for the all-or-nothing writes (checkout, shift open/close, purchase receiving).

"""
Concurrency helpers

Two registers can race on the same drawer: one finalizing a sale while the
other closes the shift, or both opening a shift at once. The writes that
must not interleave are:

- finalize_sale: locks the open shift row, then writes sale + stock
- close_shift: locks the open shift row and the active-shift pointer
- open_shift: locks the active-shift pointer
- receive_purchase: bumps product version_id through the stock change

On PostgreSQL the row locks serialize these. SQLite ignores FOR UPDATE, so
there the version_id columns on cash_shifts, products and
active_shift_pointer turn a lost race into StaleDataError, which
run_with_retry replays from the top.
"""

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..models import CashShift


def lock_for_update(query):
    """SELECT ... FOR UPDATE on backends that support it."""
    return query.with_for_update()


def lock_open_shift(shift_id: int) -> CashShift | None:
    """
    Lock a shift row for a drawer write.

    Returns None when the shift is gone or was closed by another register
    between the caller's read and this lock.
    """
    shift = lock_for_update(db.session.query(CashShift).filter_by(id=shift_id)).first()
    if shift is None or not shift.is_open:
        return None
    return shift


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1, label: str = "write"):
    """
    Run `func` (which commits) and replay it on lock or version conflicts.

    `func` must re-read everything it writes: after a rollback the session
    holds no state from the failed attempt. Business errors (validation,
    no open shift, insufficient tender) roll back and propagate at once.
    """
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                current_app.logger.error("%s failed after %d attempts: %s", label, attempts, exc)
                raise
            current_app.logger.warning("%s conflicted (attempt %d/%d), retrying: %s", label, attempt + 1, attempts, exc)
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise
