"""GSC Connector — Central Configuration via Pydantic Settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Search Console API ──
    gsc_access_token: str = ""
    gsc_base_url: str = "https://www.googleapis.com/webmasters/v3"
    gsc_inspection_url: str = (
        "https://searchconsole.googleapis.com/v1/urlInspection/index:inspect"
    )
    gsc_request_timeout: float = 30.0

    # ── Pagination ──
    gsc_max_page_size: int = 25000  # Hard cap of searchAnalytics.query
    gsc_min_page_size: int = 100
    default_row_limit: int = 1000

    # ── App ──
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
