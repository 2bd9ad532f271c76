from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from core.config import BACKEND_DIR


def resolve_level(*, environment: str, log_level: str | None = None) -> int:
    env = (environment or "development").lower().strip()
    default_level = logging.INFO if env == "production" else logging.DEBUG
    if not log_level:
        return default_level
    level = logging.getLevelName(log_level.strip().upper())
    return level if isinstance(level, int) else default_level


def setup_logging(*, environment: str, log_level: str | None = None) -> None:
    """Configure application logging.

    - Dev: console logs, DEBUG level (per-course placement traces included).
    - Prod: console + rotating file logs, INFO level (one summary line per schedule run).

    `log_level` (e.g. "WARNING") overrides the environment default.

    Safe to call multiple times (won't double-add handlers).
    """

    root = logging.getLogger()
    if root.handlers:
        return

    env = (environment or "development").lower().strip()
    level = resolve_level(environment=env, log_level=log_level)

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    handlers: list[logging.Handler] = []

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers.append(console)

    if env == "production":
        logs_dir = Path(BACKEND_DIR) / "logs"
        logs_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            logs_dir / "scheduler.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers)

    # Keep common noisy loggers reasonable.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    # openpyxl warns about every unsupported style extension in uploaded workbooks.
    logging.getLogger("openpyxl").setLevel(logging.WARNING)
