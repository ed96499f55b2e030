from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv

from config import get_settings_module

from .container import Container, build_container
from .core.enums import StoreBackend
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_container() -> Container:
    """Build the service graph from the settings module picked by APP_ENV."""
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    backend = StoreBackend(getattr(settings, "STORE_BACKEND", StoreBackend.MYSQL.value))
    db_config = getattr(settings, "DB_CONFIG", None)

    if backend is StoreBackend.MYSQL:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            logger.info("demo seed ready")
    else:
        logger.info("settings=%s store=%s", settings_module, backend.value)

    return build_container(
        db_config=db_config,
        backend=backend,
        timezone_name=getattr(settings, "ATTENDANCE_TIMEZONE", "UTC"),
        max_retries=int(getattr(settings, "CONCURRENCY_MAX_RETRIES", 3)),
        auto_close_break_on_clock_out=bool(getattr(settings, "AUTO_CLOSE_BREAK_ON_CLOCK_OUT", True)),
    )
