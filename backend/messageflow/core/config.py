from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "MessageFlow"
    debug: bool = False

    # Database
    database_url: str = f"sqlite:///{Path(__file__).resolve().parent.parent.parent / 'messageflow.db'}"

    # LLM
    llm_provider: str = "openrouter"  # openrouter | gemini
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    gemini_api_key: str = ""
    use_online_mode: bool = False
    ai_request_timeout: float = 180.0  # seconds

    # Scheduling
    cron_timezone: str = "Asia/Shanghai"  # zone the due check is evaluated in
    default_timezone: str = "Asia/Shanghai"  # fallback for unknown zone names
    internal_scheduler_enabled: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "env_prefix": "MESSAGEFLOW_",
    }


settings = Settings()
