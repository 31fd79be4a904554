from __future__ import annotations
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from planwise.advisor import AdvisorResult

_log = logging.getLogger(__name__)

_DEFAULT_PATH = Path("data") / "history" / "plans.json"


class HistoryError(RuntimeError):
    """The history file exists but cannot be read as plan history."""


class PlanHistory:
    """
    Plan history in one JSON file: {user_id: [result, ...]}, newest first.

    Single-process store; plan ids are uuid4 so lookups by id search every user.
    """

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else _DEFAULT_PATH

    def _read(self) -> Dict[str, List[dict]]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise HistoryError(f"Cannot read plan history at {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise HistoryError(f"Plan history at {self.path} is not a JSON object")
        return data

    def _write(self, data: Dict[str, List[dict]]) -> None:
        # temp sibling + os.replace: a failed dump leaves the previous file intact
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def save(self, user_id: str, result: AdvisorResult) -> None:
        data = self._read()
        data.setdefault(user_id, []).insert(0, result.to_dict())
        self._write(data)
        _log.info(f"Saved plan {result.id} for user {user_id} ({len(data[user_id])} total)")

    def get_history(self, user_id: str) -> List[AdvisorResult]:
        return [AdvisorResult.from_dict(r) for r in self._read().get(user_id, [])]

    def get_plan(self, plan_id: str) -> Optional[AdvisorResult]:
        for results in self._read().values():
            for r in results:
                if r.get("id") == plan_id:
                    return AdvisorResult.from_dict(r)
        return None


__all__ = ["HistoryError", "PlanHistory"]
