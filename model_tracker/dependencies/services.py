"""Service dependencies for API routes.

Each request builds its own clients and services; only the cache is shared,
created once by the application and held on ``app.state``. Client
construction raises ConfigurationError when a credential is missing, which
the API error handlers translate into a 500 response.
"""

from collections.abc import Generator

from fastapi import Depends, Request

from model_tracker.services.analysis import ModelWatchListService, PortfolioAnalysisService
from model_tracker.services.cache_service import CacheService
from model_tracker.services.change_detection_service import ChangeDetectionService
from model_tracker.services.clients import (
    GmailImapClient,
    GoogleSheetsClient,
    OpenAICommentaryClient,
)
from model_tracker.services.portfolio import AccountPortfolioService, CombinedAccountService


def get_cache(request: Request) -> CacheService:
    """Application-wide cache created at startup."""
    return request.app.state.cache


def get_mail_client() -> GmailImapClient:
    return GmailImapClient()


def get_sheets_client() -> Generator[GoogleSheetsClient, None, None]:
    """
    Mapping-sheet client for one request.

    Yields:
        GoogleSheetsClient, closed after the response is sent
    """
    client = GoogleSheetsClient()
    try:
        yield client
    finally:
        client.close()


def get_commentary_client() -> Generator[OpenAICommentaryClient, None, None]:
    client = OpenAICommentaryClient()
    try:
        yield client
    finally:
        client.close()


def get_account_service(
    mail_client: GmailImapClient = Depends(get_mail_client),
    sheets_client: GoogleSheetsClient = Depends(get_sheets_client),
) -> AccountPortfolioService:
    return AccountPortfolioService(mail_client, sheets_client)


def get_change_detection_service(
    account_service: AccountPortfolioService = Depends(get_account_service),
) -> ChangeDetectionService:
    return ChangeDetectionService(account_service)


def get_combined_account_service(
    account_service: AccountPortfolioService = Depends(get_account_service),
    change_detection_service: ChangeDetectionService = Depends(get_change_detection_service),
    cache: CacheService = Depends(get_cache),
) -> CombinedAccountService:
    return CombinedAccountService(account_service, change_detection_service, cache)


def get_watch_list_service(
    account_service: AccountPortfolioService = Depends(get_account_service),
    combined_account_service: CombinedAccountService = Depends(get_combined_account_service),
    cache: CacheService = Depends(get_cache),
) -> ModelWatchListService:
    return ModelWatchListService(account_service, combined_account_service, cache)


def get_analysis_service(
    combined_account_service: CombinedAccountService = Depends(get_combined_account_service),
    watch_list_service: ModelWatchListService = Depends(get_watch_list_service),
) -> PortfolioAnalysisService:
    return PortfolioAnalysisService(combined_account_service, watch_list_service)
