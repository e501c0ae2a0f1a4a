"""Corroborate configuration — loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "CORROBORATE_", "env_file": ".env"}

    # Collaborator API keys
    anthropic_api_key: str = ""
    exa_api_key: str = ""

    # Enrichment
    anthropic_model: str = "claude-sonnet-4-5"
    enrichment_timeout: float = 30.0
    search_results: int = 8

    # Synthesis
    citation_style: str = "apa"
    conflict_ratio: float = 0.7
    strong_confidence: float = 0.8
    moderate_confidence: float = 0.6

    # Server
    host: str = "0.0.0.0"
    port: int = 8000


settings = Settings()
