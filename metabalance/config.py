from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/metabalance"
    default_tz: str = "UTC"
    auto_create_tables: bool = False
    log_level: str = "INFO"

    # Auth (HS256 bearer tokens). Override jwt_secret in every real deployment.
    jwt_secret: str = "metabalance-dev-secret-change-me-0123456789"
    token_ttl_minutes: int = 7 * 24 * 60

    # Chat-completion LLM (OpenAI-compatible; defaults to x.ai Grok)
    llm_api_key: str | None = None
    llm_base_url: str = "https://api.x.ai/v1"
    llm_model: str = "grok-4-1-fast-non-reasoning"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 1000
    llm_timeout_s: float = 30.0

    # Food nutrition lookup (Spoonacular)
    spoonacular_api_key: str | None = None
    spoonacular_base_url: str = "https://api.spoonacular.com"
    food_timeout_s: float = 12.0

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
