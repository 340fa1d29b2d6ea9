from __future__ import annotations

from sqlalchemy.orm import Session

from study_monitor.core.config import settings
from study_monitor.core.logging_conf import get_logger
from study_monitor.crawlers.adapters.respondent import RespondentAdapter
from study_monitor.crawlers.base import SourceAdapter
from study_monitor.crawlers.http_helpers import FetchFailure
from study_monitor.models.study import Study
from study_monitor.services.log_service import add_log
from study_monitor.services.notifier import DigestNotifier, DiscordNotifier, build_email_notifier
from study_monitor.services.recipient_service import list_active_recipients
from study_monitor.services.settings_service import get_notification_settings, touch_last_run
from study_monitor.services.sync_service import mark_delivered, prune, reconcile

logger = get_logger("monitor")


def _notify(
    db: Session,
    new_studies: list[Study],
    notifier: DigestNotifier | None,
    discord: DiscordNotifier | None,
) -> bool:
    channel_cfg = get_notification_settings(db)
    notifier = notifier or build_email_notifier(channel_cfg.email_from or None)
    discord = discord or DiscordNotifier(channel_cfg.discord_webhook_url)
    delivered = False

    recipients = list_active_recipients(db)
    if recipients:
        add_log(db, f"Sending notifications to {len(recipients)} recipient(s)...", "info")
        result = notifier.notify(recipients, new_studies)
        for failure in result.failed:
            add_log(db, f"Failed to notify {failure.recipient}: {failure.error}", "warning")
        if result.success:
            add_log(db, f"Email notifications sent ({result.message})", "success")
            delivered = True
        else:
            add_log(db, f"Failed to send email notifications: {result.message}", "error")
    else:
        add_log(db, "No active email recipients configured", "warning")

    if discord.enabled:
        ok, msg = discord.send(discord.build_digest_payload(new_studies))
        if ok:
            add_log(db, "Discord notification sent", "success")
            delivered = True
        else:
            add_log(db, f"Failed to send Discord notification: {msg}", "error")

    if delivered:
        for study in new_studies:
            mark_delivered(db, study.id)
    return delivered


def run_once(
    db: Session,
    adapter: SourceAdapter | None = None,
    notifier: DigestNotifier | None = None,
    discord: DiscordNotifier | None = None,
) -> list[Study]:
    """Run one fetch → reconcile → notify pass and return the studies inserted by it.

    Never raises: fetch failures end the run early and any other error is
    logged at the run boundary. ``last_run_at`` is updated on every outcome.
    """

    adapter = adapter or RespondentAdapter()
    new_studies: list[Study] = []
    try:
        add_log(db, "Initiating check...", "info")
        try:
            candidates = adapter.fetch()
        except FetchFailure as exc:
            add_log(db, f"Fetch failed: {exc.reason}", "error")
            return []

        if not candidates:
            add_log(db, "No studies found on the listing page", "info")
            return []
        add_log(db, f"Found {len(candidates)} potential studies", "info")

        new_studies = reconcile(db, candidates)
        for study in new_studies:
            add_log(db, f'New study: "{study.title}" (${study.payout})', "success")

        if settings.prune_stale_studies:
            removed = prune(db, [c.external_id for c in candidates])
            if removed:
                add_log(db, f"Removed {removed} studies no longer listed", "info")

        if not new_studies:
            add_log(db, "All studies already known - no new matches", "info")
            return []

        _notify(db, new_studies, notifier, discord)
        return new_studies
    except Exception as exc:  # noqa: BLE001
        db.rollback()
        logger.exception("check_failed")
        add_log(db, f"Check failed: {exc}", "error")
        return new_studies
    finally:
        try:
            touch_last_run(db)
        except Exception as exc:  # noqa: BLE001
            db.rollback()
            logger.error("last_run_update_failed", error=str(exc))
