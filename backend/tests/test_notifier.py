from __future__ import annotations

from types import SimpleNamespace

from study_monitor.crawlers.base import NormalizedStudy
from study_monitor.services.notifier import DigestNotifier, DigestTransport, DiscordNotifier, ResendTransport


class FakeTransport(DigestTransport):
    channel = "fake"

    def __init__(self, failing=(), ready=True):
        self.failing = set(failing)
        self.ready = ready
        self.sent = []

    def check(self):
        return (True, "ok") if self.ready else (False, "transport offline")

    def send(self, to, subject, html, text):
        self.sent.append({"to": to, "subject": subject, "html": html, "text": text})
        if to in self.failing:
            return False, "mailbox full"
        return True, "ok"


def _studies(count: int) -> list[NormalizedStudy]:
    return [
        NormalizedStudy(
            external_id=f"{i:04x}",
            title=f"Study {i}",
            payout=50 + i,
            duration="30 min",
            study_type="Remote",
            link=f"https://app.respondent.io/respondents/v2/projects/view/{i:04x}",
        )
        for i in range(count)
    ]


def test_digest_caps_items_but_reports_true_count():
    transport = FakeTransport()
    result = DigestNotifier(transport).notify(["ops@example.com"], _studies(12))

    assert result.success is True
    message = transport.sent[0]
    assert message["subject"] == "12 New Studies Found"
    assert "Study 9" in message["text"]
    assert "Study 10" not in message["text"]
    assert "...and 2 more." in message["text"]
    assert "...and 2 more." in message["html"]


def test_single_study_subject_is_singular():
    transport = FakeTransport()
    DigestNotifier(transport).notify(["ops@example.com"], _studies(1))

    assert transport.sent[0]["subject"] == "1 New Study Found"


def test_one_failing_recipient_does_not_fail_the_batch():
    transport = FakeTransport(failing={"b@example.com"})
    result = DigestNotifier(transport).notify(["a@example.com", "b@example.com"], _studies(2))

    assert result.success is True
    assert result.delivered_to == ["a@example.com"]
    assert [o.recipient for o in result.failed] == ["b@example.com"]
    assert result.failed[0].error == "mailbox full"


def test_all_recipients_failing_is_a_failure():
    transport = FakeTransport(failing={"a@example.com"})
    result = DigestNotifier(transport).notify(["a@example.com"], _studies(1))

    assert result.success is False
    assert result.attempted is True


def test_unusable_transport_sends_nothing():
    transport = FakeTransport(ready=False)
    result = DigestNotifier(transport).notify(["a@example.com"], _studies(1))

    assert result.success is False
    assert result.attempted is True
    assert result.message == "transport offline"
    assert transport.sent == []


def test_inactive_and_duplicate_recipients_are_filtered():
    transport = FakeTransport()
    recipients = [
        SimpleNamespace(email="a@example.com", active=True),
        SimpleNamespace(email="b@example.com", active=False),
        "a@example.com",
    ]
    result = DigestNotifier(transport).notify(recipients, _studies(1))

    assert [m["to"] for m in transport.sent] == ["a@example.com"]
    assert result.success is True


def test_nothing_to_send_is_not_attempted():
    transport = FakeTransport()

    no_recipients = DigestNotifier(transport).notify([], _studies(1))
    no_studies = DigestNotifier(transport).notify(["a@example.com"], [])

    assert no_recipients.attempted is False
    assert no_studies.attempted is False
    assert transport.sent == []


def test_resend_transport_requires_credentials():
    assert ResendTransport("", "from@example.com").check()[0] is False
    assert ResendTransport("key", "").check()[0] is False
    assert ResendTransport("key", "from@example.com").check() == (True, "ok")


def test_discord_digest_payload():
    payload = DiscordNotifier.build_digest_payload(_studies(12))
    embed = payload["embeds"][0]

    assert embed["title"] == "12 New Studies Found!"
    assert embed["color"] == 0x10B981
    assert embed["description"].count("[Apply Here]") == 10
    assert embed["description"].endswith("...and 2 more.")


def test_discord_without_webhook_is_disabled():
    notifier = DiscordNotifier("")

    assert notifier.enabled is False
    assert notifier.send({"content": "x"}) == (False, "webhook not configured")
