from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Study Monitor"
    env: str = "dev"
    api_prefix: str = "/api/v1"

    database_url: str = "sqlite:///./study_monitor.db"

    auth_username: str = "admin"
    auth_password: str = "change-me"
    jwt_secret: str = "change-me-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24

    target_url: str = "https://app.respondent.io/respondents/v2/projects/browse"
    base_url: str = "https://app.respondent.io"
    render_js: bool = True
    fetch_timeout_seconds: int = 30
    wait_selector: str = "a[href*='/respondents/v2/projects/view/']"
    wait_selector_timeout_seconds: int = 15
    chromium_executable_path: str = ""

    default_check_interval_minutes: int = 10
    prune_stale_studies: bool = False
    digest_max_items: int = 10

    resend_api_key: str = ""
    email_from: str = "onboarding@resend.dev"
    discord_webhook_url: str = ""

    log_level: str = "INFO"
    log_dir: str = ""
    start_agent_on_startup: bool = True


settings = Settings()
