"""Clients for the external collaborators: mail, mapping sheet, LLM."""

from .gmail_imap_client import GmailImapClient
from .google_sheets_client import GoogleSheetsClient
from .openai_client import CommentaryResponse, OpenAICommentaryClient

__all__ = [
    "CommentaryResponse",
    "GmailImapClient",
    "GoogleSheetsClient",
    "OpenAICommentaryClient",
]
