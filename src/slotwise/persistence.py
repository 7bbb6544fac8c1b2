"""JSON file persistence for tasks, energy logs and scheduler config."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from slotwise.models import EnergyLog, SchedulerConfig, StoredTask

logger = logging.getLogger(__name__)

DEFAULT_DB_FILE = "slotwise.json"


def default_db_path() -> Path:
    return Path(os.environ.get("SLOTWISE_DB", DEFAULT_DB_FILE))


class Store:
    """Reads and writes the local database (JSON file)."""

    def __init__(self, db_path: str | Path | None = None):
        self.db_path = Path(db_path) if db_path is not None else default_db_path()

    def load(self) -> tuple[SchedulerConfig | None, dict[str, StoredTask], list[EnergyLog]]:
        """Return (config_or_None, {task_id: StoredTask}, energy_logs)."""
        if not self.db_path.exists():
            return None, {}, []

        raw = json.loads(self.db_path.read_text())

        config = None
        if "config" in raw:
            config = SchedulerConfig.from_dict(raw["config"])

        tasks: dict[str, StoredTask] = {}
        for tid, tdata in raw.get("tasks", {}).items():
            try:
                tasks[tid] = StoredTask.from_dict(tid, tdata)
            except (KeyError, TypeError):
                logger.warning("Skipping malformed task %s in %s", tid, self.db_path)

        logs: list[EnergyLog] = []
        for entry in raw.get("energy_logs", []):
            try:
                logs.append(EnergyLog.from_dict(entry))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed energy log %r in %s", entry, self.db_path)

        logger.debug("Loaded %d tasks and %d energy logs from %s", len(tasks), len(logs), self.db_path)
        return config, tasks, logs

    def save(
        self,
        config: SchedulerConfig | None,
        tasks: dict[str, StoredTask],
        logs: list[EnergyLog],
    ) -> None:
        """Persist config, tasks and logs to disk."""
        raw: dict = {}
        if config is not None:
            raw["config"] = config.to_dict()
        raw["tasks"] = {tid: t.to_dict() for tid, t in tasks.items()}
        raw["energy_logs"] = [log.to_dict() for log in logs]
        self.db_path.write_text(json.dumps(raw, indent=4))
        logger.debug("Saved %d tasks and %d energy logs to %s", len(tasks), len(logs), self.db_path)

    def generate_id(self, tasks: dict[str, StoredTask]) -> str:
        """Generate the next T-N id."""
        existing = [int(k.split("-")[1]) for k in tasks if k.startswith("T-")]
        next_num = max(existing, default=0) + 1
        return f"T-{next_num}"
