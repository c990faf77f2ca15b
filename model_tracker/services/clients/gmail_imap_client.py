"""Gmail IMAP source for the vendor's daily portfolio emails."""

import email
import imaplib
import logging
from datetime import date, timedelta
from email import policy
from email.message import EmailMessage

from model_tracker.config import settings
from model_tracker.services.email_parsing.types import RawEmail
from model_tracker.services.exceptions import ConfigurationError, UpstreamFetchError

logger = logging.getLogger(__name__)

SOURCE = "IMAP"
IMAP_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

PORTFOLIO_SENDER_HINTS = ("stockapp", "shaun mcquaker")
PORTFOLIO_SUBJECT_HINTS = ("portfolio", "daily summary", "account summary", "stockapp")
PORTFOLIO_BODY_HINTS = ("portfolio", "holdings", "shares", "market value", "stockapp")


def format_imap_date(value: date) -> str:
    """date(2025, 6, 2) -> '02-Jun-2025' (locale independent)."""
    return f"{value.day:02d}-{IMAP_MONTHS[value.month - 1]}-{value.year}"


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_search_criteria(
    date_from: date | None,
    date_to: date | None,
    sender: str | None = None,
    subject: str | None = None,
) -> list[str]:
    """
    IMAP SEARCH arguments for the vendor's emails within a date range.

    BEFORE is exclusive, so the end date is advanced by one day. Without a
    range, emails whose subject carries today's or yesterday's ISO date are
    matched instead.
    """
    sender = settings.portfolio_sender_filter if sender is None else sender
    subject = settings.portfolio_subject_filter if subject is None else subject

    criteria = ["FROM", _quote(sender), "SUBJECT", _quote(subject)]

    if date_from is None and date_to is None:
        today = date.today()
        yesterday = today - timedelta(days=1)
        criteria += ["OR", "SUBJECT", _quote(today.isoformat()), "SUBJECT", _quote(yesterday.isoformat())]
        return criteria

    if date_from is not None:
        criteria += ["SINCE", format_imap_date(date_from)]
    if date_to is not None:
        criteria += ["BEFORE", format_imap_date(date_to + timedelta(days=1))]
    return criteria


def is_portfolio_email(subject: str, sender: str, body: str) -> bool:
    """Client-side check that a search hit is a portfolio summary."""
    subject, sender, body = subject.lower(), sender.lower(), body.lower()
    return (
        any(hint in sender for hint in PORTFOLIO_SENDER_HINTS)
        or any(hint in subject for hint in PORTFOLIO_SUBJECT_HINTS)
        or any(hint in body for hint in PORTFOLIO_BODY_HINTS)
    )


def message_body(message: EmailMessage) -> str:
    """HTML body, falling back to plain text."""
    part = message.get_body(preferencelist=("html", "plain"))
    if part is None:
        return ""
    return part.get_content()


def to_raw_email(message_id: str, raw: bytes) -> RawEmail:
    message = email.message_from_bytes(raw, policy=policy.default)
    return RawEmail(
        id=message_id,
        subject=str(message.get("Subject", "")),
        sender=str(message.get("From", "")),
        date=str(message.get("Date", "")),
        html_body=message_body(message),
    )


class GmailImapClient:
    """Fetches portfolio emails over IMAP (read-only mailbox access).

    Raises:
        ConfigurationError: At construction, when credentials are missing
    """

    def __init__(
        self,
        user: str | None = None,
        password: str | None = None,
        host: str | None = None,
        port: int | None = None,
        timeout: float | None = None,
    ):
        self.user = user or settings.gmail_user
        self.password = password or settings.gmail_app_password
        self.host = host or settings.imap_host
        self.port = port or settings.imap_port
        self.timeout = timeout or settings.imap_timeout_seconds
        self.mailbox = settings.imap_mailbox

        if not self.user:
            raise ConfigurationError("GMAIL_USER")
        if not self.password:
            raise ConfigurationError("GMAIL_APP_PASSWORD")

    def _connect(self) -> imaplib.IMAP4_SSL:
        connection = imaplib.IMAP4_SSL(self.host, self.port, timeout=self.timeout)
        try:
            connection.login(self.user, self.password)
        except (imaplib.IMAP4.error, OSError):
            connection.shutdown()
            raise
        return connection

    def get_portfolio_emails(
        self,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[RawEmail]:
        """
        Portfolio emails received within [date_from, date_to].

        Raises:
            UpstreamFetchError: On connection, login, search or fetch failure
        """
        criteria = build_search_criteria(date_from, date_to)
        logger.info(f"IMAP search criteria: {' '.join(criteria)}")

        try:
            with self._connect() as connection:
                connection.select(self.mailbox, readonly=True)
                status, data = connection.search(None, *criteria)
                if status != "OK":
                    raise UpstreamFetchError(SOURCE, f"search failed: {data}")

                message_numbers = data[0].split() if data and data[0] else []
                logger.info(f"Found {len(message_numbers)} emails matching criteria")

                emails = []
                for number in message_numbers:
                    status, fetched = connection.fetch(number, "(RFC822)")
                    if status != "OK" or not fetched or not isinstance(fetched[0], tuple):
                        logger.warning(f"IMAP fetch returned no body for message {number!r}")
                        continue

                    raw_email = to_raw_email(f"imap-{number.decode()}", fetched[0][1])
                    if is_portfolio_email(raw_email.subject, raw_email.sender, raw_email.html_body):
                        emails.append(raw_email)
                    else:
                        logger.debug(f"Ignoring non-portfolio email: {raw_email.subject}")
        except (imaplib.IMAP4.error, OSError) as e:
            logger.error(f"IMAP fetch failed: {e}")
            raise UpstreamFetchError(SOURCE, str(e) or type(e).__name__) from e

        logger.info(f"Fetched {len(emails)} portfolio emails")
        return emails

    def test_connection(self) -> dict:
        """Connectivity check for diagnostics; never raises."""
        details = {"user": self.user, "host": self.host, "port": self.port}
        try:
            with self._connect():
                pass
        except (imaplib.IMAP4.error, OSError) as e:
            return {"success": False, "message": f"IMAP connection failed: {e}", "details": details}
        return {"success": True, "message": "Successfully connected to IMAP", "details": details}
