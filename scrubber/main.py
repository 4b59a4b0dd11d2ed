from scrubber.blobstore.factory import BlobStoreFactory
from scrubber.config.settings import Settings, require_run_config
from scrubber.database.connection import close_pool, init_pool
from scrubber.logging.logger import Log
from scrubber.reporting.log_reporter import LogRunReporter
from scrubber.scrub.orchestrator import build_orchestrator


def main() -> None:
    """Entry point: validate config -> initialize pool -> run one scrub pass."""
    settings = Settings()
    Log.configure(settings.log_level)
    require_run_config(settings)
    blob_store = BlobStoreFactory.create(settings)
    init_pool(settings)

    try:
        orchestrator = build_orchestrator(settings, blob_store, LogRunReporter())
        orchestrator.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
