"""Settings for connecting to a Hygraph project."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ``HYGRAPH_*`` environment variables and .env."""

    model_config = SettingsConfigDict(
        env_prefix="HYGRAPH_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    project_id: str = ""
    region: str = ""
    environment: str = "master"
    # e.g. https://{REGION}.cdn.hygraph.com/content/{HASH}/{ENVIRONMENT}
    content_api: str = ""
    # e.g. https://management-{REGION}.hygraph.com/graphql
    management_api: str = ""
    management_token: str = ""

    # How often a model may be expanded along one query path
    max_model_depth: int = Field(default=5, ge=1)
    # Model name -> raw GraphQL "where" literal, e.g. {"Page": '{ slug: "home" }'}
    entries_filter: dict[str, str] = Field(default_factory=dict)

    timeout: float = 30.0
    webhook_max_attempts: int = Field(default=10, ge=1)
    webhook_retry_delay: float = 0.5

    log_level: str = "INFO"

    @property
    def manage_url(self) -> str:
        """Hygraph Studio URL of the project environment."""
        return f"https://studio-{self.region.lower()}.hygraph.com/{self.project_id}/{self.environment}"


def load_settings(**overrides) -> Settings:
    """Load settings from environment variables and .env, then apply overrides."""
    return Settings(**overrides)  # type: ignore[call-arg]
