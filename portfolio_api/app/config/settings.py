"""Settings for the portfolio API."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from portfolio_api.app.constants import DeploymentMode


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    mongodb_uri: str = Field("mongodb://localhost:27017/portfolio_db", validation_alias="MONGODB_URI")
    database_name: str = Field("portfolio_db", validation_alias="DATABASE_NAME")
    database_backend: str = Field("mongo", validation_alias="DATABASE_BACKEND")

    database_connection_timeout_ms: int = Field(5000, validation_alias="DATABASE_CONNECTION_TIMEOUT_MS")
    database_connect_timeout_seconds: float = Field(10.0, validation_alias="DATABASE_CONNECT_TIMEOUT_SECONDS")

    initial_backoff_seconds: float = Field(1.0, validation_alias="INITIAL_BACKOFF_SECONDS")
    max_backoff_seconds: float = Field(10.0, validation_alias="MAX_BACKOFF_SECONDS")
    backoff_multiplier: float = Field(2.0, validation_alias="BACKOFF_MULTIPLIER")
    max_connection_attempts: int = Field(5, validation_alias="MAX_CONNECTION_ATTEMPTS")

    readiness_ping_timeout_seconds: float = Field(5.0, validation_alias="READINESS_PING_TIMEOUT_SECONDS")

    deployment_mode: str = Field(DeploymentMode.AUTO, validation_alias="DEPLOYMENT_MODE")
    vercel: str = Field("", validation_alias="VERCEL")
    aws_lambda_function_name: str = Field("", validation_alias="AWS_LAMBDA_FUNCTION_NAME")

    environment: str = Field("production", validation_alias="ENVIRONMENT")
    frontend_url: str = Field("http://localhost:3000", validation_alias="FRONTEND_URL")

    @property
    def resolved_deployment_mode(self) -> str:
        """Explicit DEPLOYMENT_MODE wins; `auto` looks at the hosting platform's environment."""
        mode = self.deployment_mode.strip().lower()
        if mode == DeploymentMode.AUTO:
            if self.vercel.strip() == "1" or self.aws_lambda_function_name.strip():
                return DeploymentMode.SERVERLESS
            return DeploymentMode.PERSISTENT
        if mode in (DeploymentMode.PERSISTENT, DeploymentMode.SERVERLESS):
            return mode
        raise ValueError(f"Unsupported deployment mode: {mode}")

    @property
    def serverless(self) -> bool:
        return self.resolved_deployment_mode == DeploymentMode.SERVERLESS

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() == "development"
