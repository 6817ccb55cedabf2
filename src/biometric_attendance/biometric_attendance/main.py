from __future__ import annotations

import importlib
import logging
import threading
from pathlib import Path
from types import ModuleType
from typing import Optional

from dotenv import load_dotenv

from config import get_settings_module

from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
    # mysql-connector is chatty at DEBUG.
    logging.getLogger("mysql.connector").setLevel(logging.WARNING)


def load_settings() -> ModuleType:
    load_dotenv(override=False)
    return importlib.import_module(get_settings_module())


def create_app(settings: Optional[ModuleType] = None) -> Container:
    """Load settings, prepare the database and wire the services."""

    settings = settings or load_settings()
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    db_config = DBConfig.from_mapping(getattr(settings, "DB_CONFIG"))
    logger.info("settings=%s db=%s", settings.__name__, db_config.describe())

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.debug("schema ready (tables=%s)", len(list_tables(db_config)))

    container = build_container(settings)
    container.configuration_service.seed_global()
    return container


def run_polling_cycle(container: Container) -> dict:
    """Poll every active device once; returns device_id -> BatchResult | None."""

    results = container.polling_service.poll_all()
    for device_id, result in results.items():
        if result is None:
            continue
        logger.info(
            "[%s] processed=%s skipped=%s failed=%s acknowledged=%s",
            device_id,
            result.processed,
            result.skipped,
            result.failed,
            result.acknowledged,
        )
    return results


def run_forever(container: Container, *, interval: float, stop: Optional[threading.Event] = None) -> None:
    stop = stop or threading.Event()
    logger.info("Polling active devices every %.1fs", interval)
    try:
        while not stop.is_set():
            run_polling_cycle(container)
            stop.wait(interval)
    finally:
        container.device_registry.close_all()


def main() -> None:
    settings = load_settings()
    container = create_app(settings)
    try:
        run_forever(container, interval=float(getattr(settings, "POLL_INTERVAL_SECONDS", 1.0)))
    except KeyboardInterrupt:
        logger.info("Stopped")


if __name__ == "__main__":
    main()
