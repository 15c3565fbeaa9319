"""JSON-file label store: the durable "already scheduled" marker per thread."""

import json
from pathlib import Path
from typing import Any, Dict, List

from easy_ticket.config import LABELS_PATH
from easy_ticket.models import Label


class LocalLabelStore:
    def __init__(self, path: Path = LABELS_PATH):
        self.path = Path(path)
        self._data: Dict[str, Any] = {"labels": [], "threads": {}}
        self._load()

    def _load(self):
        if self.path.exists():
            # Corrupt file raises: an empty store would re-open every thread
            data = json.loads(self.path.read_text(encoding="utf-8"))
            self._data["labels"] = list(data.get("labels", []))
            self._data["threads"] = dict(data.get("threads", {}))

    def get_or_create_label(self, name: str) -> Label:
        if name not in self._data["labels"]:
            self._data["labels"].append(name)
            self._save()
        return Label(name)

    def labels_for(self, thread_id: str) -> List[Label]:
        return [Label(n) for n in self._data["threads"].get(thread_id, [])]

    def add_label(self, thread_id: str, label: Label):
        if label.name not in self._data["labels"]:
            raise KeyError(f"Unknown label {label.name!r}")
        names = self._data["threads"].setdefault(thread_id, [])
        if label.name not in names:
            names.append(label.name)
            self._save()

    def _save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(
            json.dumps(self._data, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        tmp.replace(self.path)

    def __contains__(self, thread_id: str) -> bool:
        return bool(self._data["threads"].get(thread_id))
