"""Google Sheets client for the model -> account mapping sheet.

Reads values through the Sheets v4 REST API with a service-account bearer
token. The sheet layout is one model per row: model name in column A, account
name in column B, with a header row.
"""

import json
import logging

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from model_tracker.config import settings
from model_tracker.services.exceptions import ConfigurationError, UpstreamFetchError
from model_tracker.services.portfolio.portfolio_types import ModelAccountMapping
from model_tracker.services.shared.http_client import HTTPClient, HTTPClientError

logger = logging.getLogger(__name__)

SHEETS_READONLY_SCOPE = "https://www.googleapis.com/auth/spreadsheets.readonly"
SOURCE = "Google Sheets"


def load_service_account_credentials(
    key_json: str | None = None,
    key_file: str | None = None,
) -> service_account.Credentials:
    """
    Build service-account credentials from an inline JSON key or a key file.

    Raises:
        ConfigurationError: If neither is configured or the key is unreadable
    """
    key_json = key_json if key_json is not None else settings.google_service_account_key
    key_file = key_file if key_file is not None else settings.google_service_account_key_file

    try:
        if key_json:
            info = json.loads(key_json)
            return service_account.Credentials.from_service_account_info(
                info, scopes=[SHEETS_READONLY_SCOPE]
            )
        if key_file:
            return service_account.Credentials.from_service_account_file(
                key_file, scopes=[SHEETS_READONLY_SCOPE]
            )
    except (ValueError, KeyError, OSError) as e:
        raise ConfigurationError("GOOGLE_SERVICE_ACCOUNT_KEY", str(e)) from e

    raise ConfigurationError("GOOGLE_SERVICE_ACCOUNT_KEY", "no key or key file configured")


def rows_to_mappings(rows: list[list[str]]) -> list[ModelAccountMapping]:
    """Skip the header row and rows missing a model or an account."""
    mappings = []
    for row in rows[1:]:
        if len(row) < 2:
            continue
        model, account = str(row[0]).strip(), str(row[1]).strip()
        if model and account:
            mappings.append(ModelAccountMapping(model=model, account=account))
    return mappings


class GoogleSheetsClient(HTTPClient):
    """Reads model mappings from the portfolio models spreadsheet.

    Args:
        sheet_id: Spreadsheet ID, settings.portfolio_models_sheet_id by default
        credentials: Pre-built google-auth credentials (tests, alternate auth)
    """

    def __init__(self, sheet_id: str | None = None, credentials=None):
        super().__init__(base_url=settings.google_sheets_api_url, timeout=30.0)
        self.sheet_id = sheet_id or settings.portfolio_models_sheet_id
        if not self.sheet_id:
            raise ConfigurationError("PORTFOLIO_MODELS_SHEET_ID")
        self.credentials = credentials or load_service_account_credentials()

    def _auth_headers(self) -> dict[str, str]:
        if not self.credentials.valid:
            try:
                self.credentials.refresh(Request())
            except GoogleAuthError as e:
                logger.error(f"Google service account token refresh failed: {e}")
                raise UpstreamFetchError(SOURCE, f"authentication failed: {e}") from e
        return {"Authorization": f"Bearer {self.credentials.token}"}

    def get_values(self, cell_range: str) -> list[list[str]]:
        """Raw cell values for an A1 range; empty trailing cells are omitted by the API."""
        headers = self._auth_headers()
        try:
            payload = self.get_json(
                f"/spreadsheets/{self.sheet_id}/values/{cell_range}",
                headers=headers,
            )
        except HTTPClientError as e:
            logger.error(f"Failed to read sheet range {cell_range}: {e}")
            raise UpstreamFetchError(SOURCE, str(e)) from e
        return payload.get("values", [])

    def get_model_account_mappings(self) -> list[ModelAccountMapping]:
        rows = self.get_values(settings.model_mappings_range)
        mappings = rows_to_mappings(rows)
        logger.info(f"Loaded {len(mappings)} model-account mappings from {len(rows)} rows")
        return mappings

    def get_portfolio_models(self) -> list[str]:
        """Model names in column A, header excluded."""
        rows = self.get_values(settings.portfolio_models_range)
        return [str(row[0]).strip() for row in rows[1:] if row and str(row[0]).strip()]
