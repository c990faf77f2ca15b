"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Gmail IMAP (portfolio email source)
    gmail_user: str = ""
    gmail_app_password: str = ""
    imap_host: str = "imap.gmail.com"
    imap_port: int = 993
    imap_timeout_seconds: float = 60.0
    imap_mailbox: str = "INBOX"
    portfolio_sender_filter: str = "Shaun McQuaker"
    portfolio_subject_filter: str = "StockApp Systems"
    # Delay before the comparison-day fetch so IMAP is not hit twice at once
    imap_fetch_stagger_seconds: float = 0.0

    # Google Sheets (model -> account mappings)
    google_service_account_key: str = ""  # JSON string
    google_service_account_key_file: str = ""
    portfolio_models_sheet_id: str = ""
    model_mappings_range: str = "Sheet1!A:B"
    portfolio_models_range: str = "Sheet1!A:A"
    google_sheets_api_url: str = "https://sheets.googleapis.com/v4"

    # OpenAI (portfolio commentary)
    openai_api_key: str = ""
    openai_model: str = "gpt-4"
    openai_base_url: str = "https://api.openai.com/v1"

    # Outbound email (SendGrid)
    sendgrid_api_key: str = ""
    email_from_address: str = "alerts@modeltracker.local"
    email_from_name: str = "Model Tracker"
    portfolio_summary_email: str = ""
    error_notification_email: str = ""

    # Cache TTLs
    cache_default_ttl_seconds: int = 30 * 60
    cache_email_ttl_seconds: int = 60 * 60

    # Market calendar
    market_timezone: str = "America/New_York"

    # Application
    log_level: str = "INFO"
    debug: bool = True

    # CORS
    allowed_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )


settings = Settings()
