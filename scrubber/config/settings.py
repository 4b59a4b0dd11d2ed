from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from scrubber.scrub.exceptions import ConfigurationError

BLOB_BACKENDS = ("s3", "local")
LIVENESS_MODES = ("not_before", "any")


class Settings(BaseSettings):
    """Scrubber configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "core"
    db_username: str = "core"
    db_password: str = "secret"
    db_pool_max_size: int = Field(default=10, ge=2)

    blob_backend: str = "s3"
    blob_bucket: str = ""
    blob_region: str | None = None
    blob_endpoint_url: str | None = None
    blob_access_key_id: str | None = None
    blob_secret_access_key: str | None = None
    blob_local_root: str = ""

    scrub_batch_size: int = Field(default=32, ge=1)
    scrub_liveness_mode: str = "not_before"
    scrub_dry_run: bool = False



def require_run_config(settings: Settings) -> None:
    """Fail fast on configuration a scrub run cannot start without.

    Raises:
        ConfigurationError: if an endpoint, bucket or policy value is missing or unknown.
    """
    backend = settings.blob_backend.lower()
    if backend not in BLOB_BACKENDS:
        raise ConfigurationError(
            f"Unknown blob backend '{backend}'. Choose from: {list(BLOB_BACKENDS)}"
        )
    if backend == "s3" and not settings.blob_bucket.strip():
        raise ConfigurationError("blob_bucket is required for blob_backend=s3")
    if backend == "local" and not settings.blob_local_root.strip():
        raise ConfigurationError("blob_local_root is required for blob_backend=local")
    if not settings.db_host.strip():
        raise ConfigurationError("db_host is required")
    if settings.scrub_liveness_mode.lower() not in LIVENESS_MODES:
        raise ConfigurationError(
            f"Unknown liveness mode '{settings.scrub_liveness_mode}'. "
            f"Choose from: {list(LIVENESS_MODES)}"
        )
