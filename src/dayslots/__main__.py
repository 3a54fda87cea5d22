from __future__ import annotations

import logging
import sys

from .config import ConfigManager, DaySlotsConfig
from .storage import StoreError, TaskStore
from .tui.app import DaySlotsApp

log = logging.getLogger("dayslots")


def configure_logging(config: DaySlotsConfig) -> None:
    log_file = config.logging.file
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=log_file,
        level=config.logging.level_number,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main() -> None:
    manager = ConfigManager()
    config = manager.load()
    configure_logging(config)
    for problem in manager.errors():
        log.warning(problem)
    try:
        store = TaskStore(config.storage.database)
    except StoreError as exc:
        log.error("Failed to initialize database: %s", exc)
        print(f"Failed to initialize database: {exc}", file=sys.stderr)
        sys.exit(1)
    DaySlotsApp(config=config, store=store).run()


if __name__ == "__main__":  # pragma: no cover
    main()
