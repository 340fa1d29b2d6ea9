from __future__ import annotations

import pytest

from study_monitor.services.log_service import add_log, clear_logs, list_logs
from study_monitor.services.recipient_service import (
    DuplicateRecipientError,
    add_recipient,
    list_active_recipients,
    remove_recipient,
    set_recipient_active,
)


def test_logs_are_listed_newest_first_and_limited(db):
    for i in range(5):
        add_log(db, f"entry {i}", "info")

    latest = list_logs(db, limit=3)

    assert [row.message for row in latest] == ["entry 4", "entry 3", "entry 2"]


def test_unknown_log_type_is_rejected(db):
    with pytest.raises(ValueError):
        add_log(db, "nope", "debug")


def test_clear_logs(db):
    add_log(db, "one", "success")
    add_log(db, "two", "error")

    assert clear_logs(db) == 2
    assert list_logs(db) == []


def test_recipients_are_unique_and_normalized(db):
    row = add_recipient(db, "  Ops@Example.com ")
    assert row.email == "ops@example.com"

    with pytest.raises(DuplicateRecipientError):
        add_recipient(db, "ops@example.com")


def test_only_active_recipients_are_returned(db):
    first = add_recipient(db, "a@example.com")
    add_recipient(db, "b@example.com")
    add_recipient(db, "c@example.com", active=False)

    set_recipient_active(db, first.id, False)

    assert [r.email for r in list_active_recipients(db)] == ["b@example.com"]
    assert set_recipient_active(db, 999, True) is None


def test_remove_recipient(db):
    recipient_id = add_recipient(db, "a@example.com").id

    assert remove_recipient(db, recipient_id) is True
    assert remove_recipient(db, recipient_id) is False
