from __future__ import annotations
import json
import os
from typing import Dict

from bondflow.domain.ports import SettingsStorePort

SETTINGS_FILENAME = "bondflow_settings.json"


class StorageLocal(SettingsStorePort):
    """Local filesystem storage for runtime settings (JSON)."""

    def __init__(self, root_dir: str = ".", filename: str = SETTINGS_FILENAME) -> None:
        self.root = root_dir
        self.filename = filename

    @property
    def path(self) -> str:
        return os.path.join(self.root, self.filename)

    def save_settings(self, payload: Dict) -> None:
        os.makedirs(self.root, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2, sort_keys=True)

    def load_settings(self) -> Dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} must contain a JSON object.")
        return data
