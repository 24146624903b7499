from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from tokenmold.domain.repositories import AdjectiveSource

BUNDLED_ADJECTIVE_DIR = Path(__file__).resolve().parents[2] / "data" / "adjectives"


class FileAdjectiveSource(AdjectiveSource):
    """One adjective table per ``<table>.txt`` file, one word per line."""

    def __init__(self, data_dir: str | Path | None = None) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else BUNDLED_ADJECTIVE_DIR
        self._tables: Dict[str, List[str]] = {}

    def list_tables(self) -> List[str]:
        if not self.data_dir.exists():
            return []
        return sorted(path.stem for path in self.data_dir.glob("*.txt"))

    def words(self, table_id: str) -> List[str]:
        if table_id not in self._tables:
            path = self.data_dir / f"{table_id}.txt"
            if not path.exists():
                return []
            lines = path.read_text(encoding="utf-8").splitlines()
            self._tables[table_id] = [line.strip() for line in lines if line.strip() and not line.startswith("#")]
        return list(self._tables[table_id])
