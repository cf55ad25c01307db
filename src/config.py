#  Copyright (C) 2010-2026 Evolveum and contributors
#
#  Licensed under the EUPL-1.2 or later.

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_REPO_ROOT = Path(__file__).resolve().parents[1]


class LogLevel(str, Enum):
    """
    Log level settings for the application.

    :cvar debug: Debug-level logging, most verbose.
    :cvar info: Informational messages, default level.
    :cvar warning: Warning messages, potential issues.
    :cvar error: Error messages, serious problems.
    :cvar critical: Critical errors, application shutdown scenarios.
    """

    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"
    critical = "critical"


class LoggingSettings(BaseModel):
    """
    Configuration for application logging.

    :param level: LogLevel enum specifying the logging threshold.
    :param access_log: Enable or disable access logs.
    :param colors: Enable or disable colored log output.
    """

    level: LogLevel = LogLevel.info
    access_log: bool = True
    colors: bool = False


class LangfuseSettings(BaseModel):
    """
    Configuration for the Langfuse client.

    :param public_key: Public Langfuse host key.
    :param secret_key: Secret Langfuse host key.
    :param host: Langfuse host.
    :param tracing_enabled: Enable/disable langfuse tracing.
    :param environment: Environment name e.g. demo, dev-myname.
    """

    public_key: str = "emptykey"
    secret_key: str = "emptykey"
    host: str = ""
    tracing_enabled: bool = False
    environment: str = "dev-whoami"


class UploadSettings(BaseModel):
    """
    Configuration for upload classification and the schema produced from it.

    :param scim_read_limit: Number of leading bytes of a file inspected when looking for SCIM documents.
    :param default_schema_name: Schema name used when no uploaded document provides one.
    :param default_version: Schema version used when no uploaded document provides one.
    :param prefer_user_name_as_key: Make SCIM ``userName`` the key attribute instead of ``id`` when present.
    """

    scim_read_limit: int = 400_000
    default_schema_name: str = "Connector"
    default_version: str = "1.0.0"
    prefer_user_name_as_key: bool = True


class ExtractionSettings(BaseModel):
    """
    Configuration for the asynchronous extraction backend.

    :param submit_url: Endpoint receiving one multipart upload per file.
    :param poll_url: Endpoint answering result polls keyed by correlation id.
    :param poll_delays: Fixed wait (seconds) before each poll, in order.
    :param correlation_id_length: Number of symbols of a generated correlation id.
    :param request_timeout: Total HTTP timeout in seconds, None keeps the transport default.
    """

    submit_url: str = "http://localhost:7071/api/ai/submitFile"
    poll_url: str = "http://localhost:8090/api/v1/extraction/results"
    poll_delays: list[float] = Field(
        [10.0, 15.0, 15.0, 10.0, 15.0],
        description="Fixed, non-adaptive polling schedule",
    )
    correlation_id_length: int = 30
    request_timeout: Optional[float] = None

    @field_validator("poll_delays")
    @classmethod
    def validate_poll_delays(cls, v: list[float]) -> list[float]:
        if any(d < 0 for d in v):
            raise ValueError("poll delays must not be negative")
        return v


class StorageSettings(BaseModel):
    """
    Filesystem locations of session and job records.

    :param sessions_dir: Directory holding one JSON file per session.
    :param jobs_dir: Directory holding queued/running/finished/failed job records.
    """

    sessions_dir: Path = _REPO_ROOT / "sessions"
    jobs_dir: Path = _REPO_ROOT / "jobs"


class AppSettings(BaseModel):
    """
    Core application settings for the API service.

    :param title: API title shown in docs.
    :param version: API version string.
    :param description: API description displayed in docs.
    :param api_base_url: Base path for all routes.
    :param host: Host address for Uvicorn server.
    :param port: Port number for Uvicorn server.
    :param workers: Number of worker processes.
    """

    title: str = "Connector Schema Studio"
    version: str = "0.1.0"
    description: str = "Turns SCIM, SOAP/WSDL and free-form uploads into one editable connector schema"
    api_base_url: str = "/api"

    host: str = "0.0.0.0"
    port: int = 8090
    workers: int = 1


class Settings(BaseSettings):
    """
    Application settings loaded from environment or defaults.

    Uses nested environment variables with '__' delimiter.

    Example: LOGGING__LEVEL=error
             EXTRACTION__SUBMIT_URL=https://worker.example/api/ai/submitFile
             EXTRACTION__POLL_DELAYS=[5, 5, 10]
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app: AppSettings = AppSettings()
    logging: LoggingSettings = LoggingSettings()
    langfuse: LangfuseSettings = LangfuseSettings()
    upload: UploadSettings = UploadSettings()
    extraction: ExtractionSettings = ExtractionSettings()
    storage: StorageSettings = StorageSettings()


config = Settings()
