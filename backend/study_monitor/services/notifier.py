from __future__ import annotations
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from html import escape

import httpx

from study_monitor.core.config import settings
from study_monitor.core.logging_conf import get_logger

logger = get_logger("notifier")


def _plural(count: int) -> str:
    return "Study" if count == 1 else "Studies"


def _summary_line(study) -> str:
    parts = [
        f"Payout: ${study.payout}",
        f"Duration: {study.duration}",
        f"Type: {study.study_type}",
    ]
    if getattr(study, "study_format", None):
        parts.append(f"Format: {study.study_format}")
    if getattr(study, "match_score", None):
        parts.append(f"Match: {study.match_score}%")
    return " | ".join(parts)


@dataclass
class DeliveryOutcome:
    recipient: str
    ok: bool
    error: str = ""


@dataclass
class NotifyResult:
    success: bool
    attempted: bool
    message: str
    outcomes: list[DeliveryOutcome] = field(default_factory=list)

    @property
    def delivered_to(self) -> list[str]:
        return [o.recipient for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[DeliveryOutcome]:
        return [o for o in self.outcomes if not o.ok]


class DigestTransport:
    """Send one rendered digest to one address. Implementations never raise."""

    channel = "base"

    def check(self) -> tuple[bool, str]:
        return True, "ok"

    def send(self, to: str, subject: str, html: str, text: str) -> tuple[bool, str]:
        raise NotImplementedError


class ResendTransport(DigestTransport):
    channel = "email"
    API_URL = "https://api.resend.com/emails"

    def __init__(self, api_key: str, sender: str, timeout: int = 20):
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    def check(self) -> tuple[bool, str]:
        if not self.api_key:
            return False, "resend api key not configured"
        if not self.sender:
            return False, "sender address not configured"
        return True, "ok"

    def send(self, to: str, subject: str, html: str, text: str) -> tuple[bool, str]:
        payload = {"from": self.sender, "to": [to], "subject": subject, "html": html, "text": text}
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.post(self.API_URL, json=payload, headers=headers)
                if resp.status_code >= 300:
                    return False, f"resend status={resp.status_code} body={resp.text[:300]}"
            return True, "ok"
        except Exception as exc:  # noqa: BLE001
            return False, str(exc)


class DigestNotifier:
    MAX_DIGEST_ITEMS = 10

    def __init__(self, transport: DigestTransport, max_items: int | None = None):
        self.transport = transport
        self.max_items = max_items or self.MAX_DIGEST_ITEMS

    @staticmethod
    def build_subject(total: int) -> str:
        return f"{total} New {_plural(total)} Found"

    @classmethod
    def build_text(cls, studies: Sequence, total: int) -> str:
        lines = [f"{total} new {_plural(total).lower()} found:", ""]
        for study in studies:
            lines.append(study.title)
            lines.append(f"  {_summary_line(study)}")
            if getattr(study, "posted_at", None):
                lines.append(f"  Posted: {study.posted_at}")
            if getattr(study, "link", None):
                lines.append(f"  {study.link}")
            lines.append("")
        if total > len(studies):
            lines.append(f"...and {total - len(studies)} more.")
        return "\n".join(lines).rstrip() + "\n"

    @classmethod
    def build_html(cls, studies: Sequence, total: int) -> str:
        rows = []
        for study in studies:
            posted = link = ""
            if getattr(study, "posted_at", None):
                posted = (
                    "<p style='margin:4px 0 0 0;color:#9ca3af;font-size:12px'>"
                    f"Posted: {escape(study.posted_at)}</p>"
                )
            if getattr(study, "link", None):
                link = f"<p style='margin:8px 0 0 0'><a href='{escape(study.link)}'>View Study</a></p>"
            rows.append(
                "<tr><td style='padding:16px;border-bottom:1px solid #e5e7eb'>"
                f"<h3 style='margin:0 0 8px 0'>{escape(study.title)}</h3>"
                f"<p style='margin:0;color:#6b7280;font-size:14px'>{escape(_summary_line(study))}</p>"
                f"{posted}{link}</td></tr>"
            )
        more = f"<p>...and {total - len(studies)} more.</p>" if total > len(studies) else ""
        return (
            "<!DOCTYPE html><html><body style='font-family:sans-serif'>"
            f"<h1>{total} New {_plural(total)} Found</h1>"
            f"<table style='width:100%;border-collapse:collapse'>{''.join(rows)}</table>"
            f"{more}</body></html>"
        )

    def notify(self, recipients: Iterable, studies: Iterable) -> NotifyResult:
        """Send one digest per active recipient.

        ``recipients`` holds plain addresses or objects with ``email`` and
        ``active`` attributes. The batch succeeds when the transport is usable
        and at least one recipient accepted the message; individual failures
        are reported in ``outcomes`` and are not retried.
        """

        studies = list(studies)
        addresses: list[str] = []
        for item in recipients:
            if isinstance(item, str):
                email = item
            elif getattr(item, "active", True):
                email = item.email
            else:
                continue
            if email and email not in addresses:
                addresses.append(email)

        if not studies:
            return NotifyResult(success=False, attempted=False, message="no studies to notify")
        if not addresses:
            return NotifyResult(success=False, attempted=False, message="no active recipients")

        ready, reason = self.transport.check()
        if not ready:
            logger.error("digest_transport_unavailable", channel=self.transport.channel, error=reason)
            return NotifyResult(success=False, attempted=True, message=reason)

        total = len(studies)
        shown = studies[: self.max_items]
        subject = self.build_subject(total)
        html = self.build_html(shown, total)
        text = self.build_text(shown, total)

        outcomes: list[DeliveryOutcome] = []
        for address in addresses:
            ok, msg = self.transport.send(address, subject, html, text)
            outcomes.append(DeliveryOutcome(recipient=address, ok=ok, error="" if ok else msg))
            if ok:
                logger.info("digest_sent", recipient=address, studies=total)
            else:
                logger.warning("digest_send_failed", recipient=address, error=msg)

        sent = sum(1 for o in outcomes if o.ok)
        if sent == 0:
            return NotifyResult(success=False, attempted=True, message="all recipients failed", outcomes=outcomes)
        return NotifyResult(
            success=True,
            attempted=True,
            message=f"sent to {sent}/{len(outcomes)} recipient(s)",
            outcomes=outcomes,
        )


class DiscordNotifier:
    MAX_DIGEST_ITEMS = 10
    MAX_DESCRIPTION_LEN = 4000

    def __init__(self, webhook_url: str):
        self.webhook_url = webhook_url

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    @classmethod
    def build_digest_payload(cls, studies: Sequence) -> dict:
        total = len(studies)
        blocks = []
        for study in list(studies)[: cls.MAX_DIGEST_ITEMS]:
            lines = [f"**{study.title}**", _summary_line(study)]
            if getattr(study, "posted_at", None):
                lines.append(f"Posted: {study.posted_at}")
            if getattr(study, "link", None):
                lines.append(f"[Apply Here]({study.link})")
            blocks.append("\n".join(lines))

        desc = "New research opportunities:\n\n" + "\n\n".join(blocks)
        if total > cls.MAX_DIGEST_ITEMS:
            desc += f"\n\n...and {total - cls.MAX_DIGEST_ITEMS} more."
        if len(desc) > cls.MAX_DESCRIPTION_LEN:
            desc = f"{desc[: cls.MAX_DESCRIPTION_LEN - 3]}..."
        return {
            "embeds": [
                {
                    "title": f"{total} New {_plural(total)} Found!",
                    "description": desc,
                    "color": 0x10B981,
                    "footer": {"text": settings.app_name},
                    "timestamp": datetime.utcnow().isoformat(),
                }
            ]
        }

    def send(self, payload: dict) -> tuple[bool, str]:
        if not self.webhook_url:
            return False, "webhook not configured"
        try:
            with httpx.Client(timeout=20) as client:
                resp = client.post(self.webhook_url, json=payload)
                if resp.status_code >= 300:
                    return False, f"discord status={resp.status_code} body={resp.text[:300]}"
            return True, "ok"
        except Exception as exc:  # noqa: BLE001
            return False, str(exc)


def build_email_notifier(sender: str | None = None) -> DigestNotifier:
    transport = ResendTransport(settings.resend_api_key, sender or settings.email_from)
    return DigestNotifier(transport, max_items=settings.digest_max_items)
