import json
import sys
import tempfile
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tokenmold.infrastructure.content_cache import FileContentCache


class FileContentCacheTests(unittest.TestCase):
    def test_writes_manifest_with_version(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cache = FileContentCache(tmp, data_version="2")
            manifest = json.loads((Path(tmp) / "manifest.json").read_text(encoding="utf-8"))
            self.assertEqual("2", manifest.get("data_version"))
            cache.set("language:welsh", {"beg": {"LLA": 1}})
            self.assertEqual({"beg": {"LLA": 1}}, cache.get("language:welsh", ttl_seconds=3600))

    def test_version_change_drops_old_languages(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            FileContentCache(tmp, data_version="1").set("language:welsh", {"beg": {}})
            second = FileContentCache(tmp, data_version="2")
            self.assertIsNone(second.get("language:welsh", ttl_seconds=None, allow_stale=True))

    def test_expired_entry_is_only_served_as_stale(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cache = FileContentCache(tmp, data_version="1")
            cache.set("language:irish", {"beg": {"SEA": 2}})
            path = cache._path_for_key("language:irish")
            envelope = json.loads(path.read_text(encoding="utf-8"))
            envelope["stored_at"] = 0
            path.write_text(json.dumps(envelope), encoding="utf-8")

            self.assertIsNone(cache.get("language:irish", ttl_seconds=60))
            self.assertEqual({"beg": {"SEA": 2}}, cache.get("language:irish", ttl_seconds=60, allow_stale=True))

    def test_sweep_expired_keeps_fresh_entries_and_manifest(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cache = FileContentCache(tmp, data_version="1")
            cache.set("fresh", {"kind": "fresh"})
            cache.set("stale", {"kind": "stale"})
            stale_path = cache._path_for_key("stale")
            envelope = json.loads(stale_path.read_text(encoding="utf-8"))
            envelope["stored_at"] = 0
            stale_path.write_text(json.dumps(envelope), encoding="utf-8")

            self.assertEqual(1, cache.sweep_expired(max_age_seconds=60))
            self.assertEqual({"kind": "fresh"}, cache.get("fresh", ttl_seconds=None))
            self.assertTrue((Path(tmp) / "manifest.json").exists())


if __name__ == "__main__":
    unittest.main()
