# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

#src/hoist/logging/log.py

from __future__ import annotations

import logging
from pathlib import Path
from datetime import datetime, timezone
import uuid

_FORMAT = "%(asctime)s | %(levelname)-7s | %(run)s | %(message)s"


class _RunFilter(logging.Filter):
    """Stamps every record with the short run id so trace files can be grepped across runs."""

    def __init__(self, run_id: str):
        super().__init__()
        self.run = run_id[:8]

    def filter(self, record: logging.LogRecord) -> bool:
        record.run = self.run
        return True


def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "hoist",
    verbose: bool = False,
) -> tuple[logging.Logger, str, Path]:
    """
    Configure the "hoist" logger for one provisioning run.

    The trace file under ~/.hoist/logs gets everything: each remote command,
    its exit code and captured output. The console only shows warnings
    (progress is printed by ConsoleObserver) unless verbose is set.

    Returns (logger, run_id, log_path); the run id is shared with the
    event observers.
    """
    run_id = str(uuid.uuid4())

    if base_dir is None:
        base_dir = Path.home() / ".hoist" / "logs"
    base_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_path = base_dir / f"{name}-{ts}-{run_id}.log"

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.filters.clear()
    logger.propagate = False
    logger.addFilter(_RunFilter(run_id))

    formatter = logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    trace = logging.FileHandler(log_path, encoding="utf-8")
    trace.setLevel(logging.DEBUG)
    trace.setFormatter(formatter)

    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(formatter)

    logger.addHandler(trace)
    logger.addHandler(console)

    logger.info("hoist run %s started", run_id)
    logger.info("trace file: %s", log_path)

    return logger, run_id, log_path
