"""FastAPI dependencies."""

from .services import (
    get_account_service,
    get_analysis_service,
    get_cache,
    get_change_detection_service,
    get_combined_account_service,
    get_commentary_client,
    get_mail_client,
    get_sheets_client,
    get_watch_list_service,
)

__all__ = [
    "get_account_service",
    "get_analysis_service",
    "get_cache",
    "get_change_detection_service",
    "get_combined_account_service",
    "get_commentary_client",
    "get_mail_client",
    "get_sheets_client",
    "get_watch_list_service",
]
