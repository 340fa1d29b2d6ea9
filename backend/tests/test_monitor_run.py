from __future__ import annotations

from study_monitor.core.config import settings
from study_monitor.crawlers.adapters.respondent import extract_studies
from study_monitor.crawlers.http_helpers import FetchFailure
from study_monitor.models.study import Study
from study_monitor.services.log_service import list_logs
from study_monitor.services.monitor_service import run_once
from study_monitor.services.notifier import DiscordNotifier, NotifyResult
from study_monitor.services.recipient_service import add_recipient
from study_monitor.services.settings_service import get_run_settings

LISTING_HTML = """
<div class="project-card">
  <a href="/respondents/v2/projects/view/abc123">Banking app interview</a>
  <span>Remote</span><span>$150</span><span>45 min</span>
</div>
<div class="project-card">
  <a href="/respondents/v2/projects/view/def456">Coffee habits survey</a>
  <span>In-person</span><span>$75</span><span>1 hour</span>
</div>
"""
ONLY_FIRST_HTML = '<div class="project-card">' + LISTING_HTML.split('<div class="project-card">')[1]


class FakeAdapter:
    def __init__(self, html=LISTING_HTML, error=None):
        self.html = html
        self.error = error

    def fetch(self):
        if self.error:
            raise self.error
        return extract_studies(self.html, "https://app.respondent.io")


class FakeNotifier:
    def __init__(self, success=True):
        self.success = success
        self.calls = []

    def notify(self, recipients, studies):
        self.calls.append(([r.email for r in recipients], [s.external_id for s in studies]))
        return NotifyResult(success=self.success, attempted=True, message="fake")


def _messages(db) -> list[str]:
    return [row.message.lower() for row in list_logs(db)]


def _run(db, adapter, notifier):
    return run_once(db, adapter=adapter, notifier=notifier, discord=DiscordNotifier(""))


def test_first_run_inserts_and_notifies_then_second_run_is_quiet(db):
    add_recipient(db, "ops@example.com")
    notifier = FakeNotifier()

    first = _run(db, FakeAdapter(), notifier)

    assert sorted(s.external_id for s in first) == ["abc123", "def456"]
    assert notifier.calls == [(["ops@example.com"], ["abc123", "def456"])]
    assert all(s.delivered for s in db.query(Study).all())

    second = _run(db, FakeAdapter(), notifier)

    assert second == []
    assert len(notifier.calls) == 1
    assert db.query(Study).count() == 2
    assert any("already known" in m for m in _messages(db))


def test_empty_listing_leaves_store_untouched(db):
    _run(db, FakeAdapter(), FakeNotifier())
    notifier = FakeNotifier()

    result = _run(db, FakeAdapter(html="<div>Nothing available right now</div>"), notifier)

    assert result == []
    assert notifier.calls == []
    assert db.query(Study).count() == 2
    assert any("no studies found" in m for m in _messages(db))


def test_fetch_failure_ends_run_without_pruning(db):
    _run(db, FakeAdapter(), FakeNotifier())
    notifier = FakeNotifier()

    result = _run(db, FakeAdapter(error=FetchFailure("https://x", "timeout after 30s")), notifier)

    assert result == []
    assert notifier.calls == []
    assert db.query(Study).count() == 2
    assert any("fetch failed: timeout after 30s" in m for m in _messages(db))
    assert get_run_settings(db).last_run_at is not None


def test_studies_missing_from_listing_are_pruned_when_enabled(db, monkeypatch):
    monkeypatch.setattr(settings, "prune_stale_studies", True)
    _run(db, FakeAdapter(), FakeNotifier())

    _run(db, FakeAdapter(html=ONLY_FIRST_HTML), FakeNotifier())

    assert [s.external_id for s in db.query(Study).all()] == ["abc123"]


def test_study_missing_for_one_run_is_not_notified_again(db):
    add_recipient(db, "ops@example.com")
    notifier = FakeNotifier()

    _run(db, FakeAdapter(), notifier)
    _run(db, FakeAdapter(html=ONLY_FIRST_HTML), notifier)
    _run(db, FakeAdapter(), notifier)

    assert notifier.calls == [(["ops@example.com"], ["abc123", "def456"])]
    assert db.query(Study).count() == 2
    assert all(s.delivered for s in db.query(Study).all())


def test_failed_notification_leaves_studies_undelivered(db):
    add_recipient(db, "ops@example.com")

    new = _run(db, FakeAdapter(), FakeNotifier(success=False))

    assert len(new) == 2
    assert not any(s.delivered for s in db.query(Study).all())
    assert any("failed to send email notifications" in m for m in _messages(db))


def test_no_recipients_skips_email(db):
    notifier = FakeNotifier()

    new = _run(db, FakeAdapter(), notifier)

    assert len(new) == 2
    assert notifier.calls == []
    assert not any(s.delivered for s in db.query(Study).all())
    assert any("no active email recipients configured" in m for m in _messages(db))


def test_unexpected_error_is_logged_not_raised(db):
    result = _run(db, FakeAdapter(error=RuntimeError("selector exploded")), FakeNotifier())

    assert result == []
    assert any("check failed: selector exploded" in m for m in _messages(db))
    assert get_run_settings(db).last_run_at is not None
