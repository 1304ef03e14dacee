from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/hirewise.db"
    secret_key: str = "dev-secret-key-change-in-production"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Text generation (match summaries, requirement parsing, field extraction)
    openai_api_key: str = ""
    # "openai", "mock" or "none"
    generation_provider: str = "openai"
    generation_model: str = "gpt-4o-mini"
    generation_temperature: float = 0.3
    generation_max_tokens: int = 1000

    # Requirement interpreter: "llm" or "keyword"
    interpreter_provider: str = "llm"

    # Resume intake: "stub", "inline" or "async"
    extraction_strategy: str = "stub"
    # Field extractor used by inline/async strategies: "llm" or "none"
    field_extractor: str = "llm"
    resume_storage_dir: str = "./data/resumes"

    # Celery configuration
    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/0"

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
