################################################################################
# N8N-BACKUP
#
# @file:        notification_manager.py
# @module:      n8n_backup.cores
# @description: Email summary and webhook notifications after a backup run.
# @author:      Markus F. (TZERO78) & KI-Assistenten
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# Copyright (c) 2025 Markus F. (TZERO78)
# MIT-Lizenz: siehe LICENSE oder https://opensource.org/licenses/MIT
# ==============================================================================
# Hinweise:
# - NullNotifier when nothing is enabled, EmailWebhookNotifier otherwise
# - Email goes through Apprise (SMTP), the webhook is a plain JSON POST
# - Notification errors are logged and never change the run's exit code
################################################################################

"""
Notification module for n8n-backup.

Renders an HTML summary of all export results and mails it, and posts a
small JSON status to a webhook.
"""

from __future__ import annotations

import html
import re
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote, urlencode

import requests

from ..errors import NotifyError
from ..helpers.constants import WEBHOOK_STATUS_LITERAL
from ..helpers.logging import get_logger, log_manager
from ..helpers.settings import BackupSettings, EmailSettings, WebhookSettings
from ..types import BackupRunReport, ExportCategory, ExportStatus, OverallStatus
from .result_tracker import ResultTracker


logger = get_logger(__name__)

STATUS_CSS_CLASS = {
    ExportStatus.SUCCESS: "success",
    ExportStatus.FAILED: "failed",
    ExportStatus.SKIPPED: "skipped",
}

HTML_STYLE = """
body { font-family: Arial, sans-serif; font-size: 14px; color: #222; }
table { border-collapse: collapse; margin: 12px 0; }
th, td { border: 1px solid #ccc; padding: 6px 12px; text-align: left; }
th { background: #f2f2f2; }
.success { color: #2e7d32; }
.failed { color: #c62828; font-weight: bold; }
.skipped { color: #ef6c00; }
"""


def parse_recipients(value: Optional[str]) -> List[str]:
    """
    Split a recipient string on ';', ',' and whitespace.

    Example:
        "a@x.com; b@y.com, c@z.com" -> ["a@x.com", "b@y.com", "c@z.com"]
    """
    if not value:
        return []
    return [token for token in re.split(r"[;,\s]+", value) if token]


def build_subject(prefix: str, status: OverallStatus, when: Optional[datetime] = None) -> str:
    when = when or datetime.now()
    return f"{prefix} {status.value} - {when.strftime('%Y-%m-%d')}"


def render_html_summary(tracker: ResultTracker, report: BackupRunReport) -> str:
    """One table row per container with a status cell per category."""
    rows = []
    for container in tracker.containers():
        cells = [f"<td>{html.escape(container)}</td>"]
        for category in ExportCategory:
            result = tracker.get(container, category)
            if result is None:
                cells.append("<td>-</td>")
                continue
            css = STATUS_CSS_CLASS[result.status]
            cells.append(f'<td class="{css}">{result.status.value} ({result.item_count})</td>')
        rows.append("<tr>" + "".join(cells) + "</tr>")

    headers = "".join(f"<th>{c.label}</th>" for c in ExportCategory)
    archive = html.escape(str(report.archive.path)) if report.archive else "not created"
    log_file = html.escape(str(report.log_file)) if report.log_file else "-"

    errors = ""
    if report.errors:
        items = "".join(f"<li>{html.escape(e)}</li>" for e in report.errors)
        errors = f"<h3>Errors</h3><ul>{items}</ul>"

    return (
        "<html><head><style>" + HTML_STYLE + "</style></head><body>"
        f"<h2>n8n Backup: {report.overall_status.value}</h2>"
        f"<p>Containers backed up successfully: {report.success_count}/{report.total}</p>"
        f"<table><tr><th>Container</th>{headers}</tr>{''.join(rows)}</table>"
        f"<p>Backup file: {archive}<br>Log file: {log_file}</p>"
        f"{errors}"
        "</body></html>"
    )


class Notifier(ABC):
    """Interface of the post-run notification step."""

    @abstractmethod
    def notify(self, report: BackupRunReport, tracker: ResultTracker) -> bool:
        ...


class NullNotifier(Notifier):
    """Used when neither email nor webhook is enabled."""

    def notify(self, report: BackupRunReport, tracker: ResultTracker) -> bool:
        logger.debug("Notifications disabled")
        return True


class EmailWebhookNotifier(Notifier):
    """
    Sends the HTML email summary and/or the webhook POST.

    All methods return True/False and never raise.
    """

    def __init__(self, email: EmailSettings, webhook: WebhookSettings):
        self.email = email
        self.webhook = webhook

    def notify(self, report: BackupRunReport, tracker: ResultTracker) -> bool:
        ok = True
        if self.email.enabled:
            recipients = parse_recipients(self.email.recipients)
            ok = self.send_summary(tracker, recipients, report) and ok
        if self.webhook.enabled:
            archive_path = report.archive.path if report.archive else None
            ok = self.notify_webhook(archive_path, report.overall_status) and ok
        return ok

    # -------------------- email --------------------

    def send_summary(
        self,
        tracker: ResultTracker,
        recipients: List[str],
        report: BackupRunReport,
    ) -> bool:
        """
        Mail the HTML result table.

        Args:
            tracker: Results of the run
            recipients: Parsed recipient addresses
            report: Run report (status, counts, paths)

        Returns:
            True if the mail was handed to the relay
        """
        try:
            if not recipients:
                raise NotifyError("No valid email recipients configured")

            subject = build_subject(self.email.subject_prefix, report.overall_status)
            body = render_html_summary(tracker, report)
            self._send_email(subject, body, recipients)
        except NotifyError as e:
            logger.error(f"Email notification failed: {e}")
            return False

        log_manager.success(logger, f"Email notification sent to {', '.join(recipients)}")
        return True

    def _build_email_url(self, recipients: List[str]) -> str:
        """Apprise SMTP URL with credentials and all recipients."""
        scheme = "mailtos" if self.email.smtp_tls else "mailto"
        auth = ""
        if self.email.smtp_user:
            auth = quote(self.email.smtp_user, safe="")
            if self.email.smtp_password:
                auth += ":" + quote(self.email.smtp_password, safe="")
            auth += "@"

        params = {"to": ",".join(recipients)}
        if self.email.from_address:
            params["from"] = self.email.from_address
        return (
            f"{scheme}://{auth}{self.email.smtp_host}:{self.email.smtp_port}"
            f"?{urlencode(params, safe='@,')}"
        )

    def _send_email(self, subject: str, body: str, recipients: List[str]) -> None:
        try:
            import apprise
        except ImportError as e:
            raise NotifyError("apprise is not installed") from e

        apobj = apprise.Apprise()
        if not apobj.add(self._build_email_url(recipients)):
            raise NotifyError(f"Invalid SMTP settings for host {self.email.smtp_host}")

        try:
            sent = apobj.notify(
                body=body,
                title=subject,
                body_format=apprise.NotifyFormat.HTML,
            )
        except Exception as e:
            raise NotifyError(f"SMTP submission raised: {e}") from e
        if not sent:
            raise NotifyError(f"SMTP submission to {self.email.smtp_host} failed")

    # -------------------- webhook --------------------

    def webhook_payload(
        self,
        archive_path: Optional[Path],
        overall_status: Optional[OverallStatus] = None,
    ) -> dict:
        status = WEBHOOK_STATUS_LITERAL
        if self.webhook.report_actual_status and overall_status is not None:
            status = overall_status.value.lower()
        return {
            "backup_file": str(archive_path) if archive_path else None,
            "timestamp": datetime.now().isoformat(timespec="seconds"),
            "status": status,
        }

    def notify_webhook(
        self,
        archive_path: Optional[Path],
        overall_status: Optional[OverallStatus] = None,
    ) -> bool:
        """
        POST the run status as JSON.

        Returns:
            True on a 2xx response, False otherwise (logged, never raised)
        """
        payload = self.webhook_payload(archive_path, overall_status)
        try:
            response = requests.post(self.webhook.url, json=payload, timeout=self.webhook.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Webhook notification failed: {e}")
            return False

        log_manager.success(logger, f"Webhook notification sent (HTTP {response.status_code})")
        return True


def build_notifier(settings: BackupSettings) -> Notifier:
    """NullNotifier unless email or webhook is enabled."""
    if settings.email.enabled or settings.webhook.enabled:
        return EmailWebhookNotifier(settings.email, settings.webhook)
    return NullNotifier()
