from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

from tokenmold.domain.repositories import LanguageSource
from tokenmold.infrastructure.data_tools.build_language_model import read_word_list, train_language_model

BUNDLED_LANGUAGE_DIR = Path(__file__).resolve().parents[2] / "data" / "languages"


class FileLanguageSource(LanguageSource):
    """Languages stored as ``<key>.json`` dictionaries or ``<key>.txt`` word lists.

    A JSON dictionary wins over a word list with the same key. Word lists are
    trained into a dictionary when loaded.
    """

    def __init__(self, data_dir: str | Path | None = None) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else BUNDLED_LANGUAGE_DIR

    def _paths(self) -> Dict[str, Path]:
        paths: Dict[str, Path] = {}
        if not self.data_dir.exists():
            return paths
        for suffix in (".txt", ".json"):
            for file_path in sorted(self.data_dir.glob(f"*{suffix}")):
                paths[file_path.stem.lower()] = file_path
        return paths

    def available_keys(self) -> List[str]:
        return sorted(self._paths())

    def load(self, key: str) -> Mapping[str, Any]:
        path = self._paths().get(key)
        if path is None:
            raise KeyError(key)
        if path.suffix == ".json":
            return json.loads(path.read_text(encoding="utf-8"))
        return train_language_model(read_word_list(path))
