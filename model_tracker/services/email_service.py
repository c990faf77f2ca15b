"""Email service using SendGrid."""

import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Cc, Mail

from model_tracker.config import settings
from model_tracker.services.alert_email_renderer import (
    CHANGE_ALERT_SUBJECT,
    render_change_alert_html,
    render_change_alert_text,
    render_error_notification_html,
)
from model_tracker.services.portfolio.portfolio_types import ChangeAlert

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending alert emails via SendGrid."""

    @staticmethod
    def _send_email(
        to_email: str,
        subject: str,
        html_content: str,
        text_content: str | None = None,
        cc_email: str | None = None,
    ) -> bool:
        """Send email via SendGrid. Returns True if successful."""
        if not settings.sendgrid_api_key:
            logger.warning("SendGrid API key not configured, skipping email send")
            return False
        if not to_email:
            logger.warning(f"No recipient configured for '{subject}', skipping email send")
            return False

        message = Mail(
            from_email=(settings.email_from_address, settings.email_from_name),
            to_emails=to_email,
            subject=subject,
            html_content=html_content,
            plain_text_content=text_content,
        )
        if cc_email and cc_email != to_email:
            message.add_cc(Cc(cc_email))

        try:
            sg = SendGridAPIClient(settings.sendgrid_api_key)
            response = sg.send(message)
            logger.info(f"Email sent to {to_email}, status: {response.status_code}")
            return response.status_code in (200, 201, 202)
        except Exception:
            logger.exception(f"Failed to send email to {to_email}")
            return False

    @classmethod
    def send_change_alert(cls, alert: ChangeAlert) -> bool:
        """Send the change alert; nothing is sent when there are no changes."""
        if alert.total_changes == 0:
            logger.info("No portfolio changes detected, skipping email alert")
            return False

        logger.info(
            f"Sending change alert to {settings.portfolio_summary_email}: "
            f"{alert.total_changes} changes across {len(alert.affected_accounts)} accounts"
        )
        return cls._send_email(
            settings.portfolio_summary_email,
            CHANGE_ALERT_SUBJECT,
            render_change_alert_html(alert),
            render_change_alert_text(alert),
            cc_email=settings.error_notification_email,
        )

    @classmethod
    def send_error_notification(cls, error_message: str) -> bool:
        """Notify the operator that the daily run failed."""
        return cls._send_email(
            settings.error_notification_email,
            "Daily Portfolio Processing Error",
            render_error_notification_html(error_message),
            f"Daily portfolio processing failed:\n\n{error_message}\n",
        )
