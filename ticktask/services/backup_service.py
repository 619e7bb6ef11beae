from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from ticktask.domain.codec import build_backup, parse_backup
from ticktask.domain.snapshot import Snapshot
from ticktask.infra.repository import restore_snapshot

from .state import AppState

logger = logging.getLogger(__name__)


class BackupService:
    def __init__(self, state: AppState) -> None:
        self._state = state

    def export_backup(self, path: Path, now: datetime) -> Path:
        payload = build_backup(self._state.refresh(), now)
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info("Exported %d tasks to %s", len(payload["tasks"]), path)
        return path

    def read_backup(self, path: Path) -> Snapshot:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"{path} is not valid JSON: {exc}") from exc
        return parse_backup(data)

    def restore(self, snapshot: Snapshot) -> Snapshot:
        restore_snapshot(snapshot, self._state.repos.session_factory)
        logger.info("Restored %d tasks and %d rules", len(snapshot.tasks), len(snapshot.rules))
        return self._state.refresh()

    def import_backup(self, path: Path) -> Snapshot:
        return self.restore(self.read_backup(path))
