"""Settings for the storage clients."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    db_host: str = Field("localhost", validation_alias="DB_HOST")
    db_port: int = Field(27017, validation_alias="DB_PORT")
    db_database: str = Field("files_manager", validation_alias="DB_DATABASE")
    db_user: str = Field("", validation_alias="DB_USER")
    db_password: str = Field("", validation_alias="DB_PASSWORD")
    db_server_selection_timeout_ms: int = Field(5000, validation_alias="DB_SERVER_SELECTION_TIMEOUT_MS")

    redis_url: str = Field("redis://localhost:6379", validation_alias="REDIS_URL")
    redis_socket_timeout_seconds: float = Field(2.0, validation_alias="REDIS_SOCKET_TIMEOUT_SECONDS")
    redis_health_check_interval_seconds: float = Field(5.0, validation_alias="REDIS_HEALTH_CHECK_INTERVAL_SECONDS")
    # Historical behaviour: report alive before the first connect is confirmed.
    redis_optimistic_liveness: bool = Field(False, validation_alias="REDIS_OPTIMISTIC_LIVENESS")
