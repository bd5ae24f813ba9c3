from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for admin operations like deleting auth users

    # OpenAI (read from OPENAI_API_KEY)
    openai_api_key: Optional[str] = None
    chat_model: str = "gpt-3.5-turbo-1106"
    embedding_model: str = "text-embedding-3-small"
    llm_request_timeout_seconds: float = 300.0
    retriever_k: int = 4

    # Text splitting
    chunk_size: int = 2000
    chunk_overlap: int = 400

    # Retry policy
    download_max_attempts: int = 3
    question_timeout_seconds: float = 15.0
    question_max_attempts: int = 0  # 0 = retry until answered
    question_retry_backoff_seconds: float = 0.0
    question_retry_backoff_max_seconds: float = 60.0

    # Storage
    signed_url_expires_in: int = 7889400  # ~3 months

    # App
    app_name: str = "docqa-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
