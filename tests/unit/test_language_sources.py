import json
import sys
import tempfile
from pathlib import Path
import unittest

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tokenmold.application.mappers.settings_mapper import DND_DEFAULT_NAME_OPTIONS
from tokenmold.domain.models.language import LanguageModel
from tokenmold.infrastructure.adjectives.file_adjective_source import FileAdjectiveSource
from tokenmold.infrastructure.content_cache import FileContentCache
from tokenmold.infrastructure.language_data import FileLanguageSource, HttpLanguageSource
from tokenmold.infrastructure.resilient_http import reset_circuit_breakers

WELSH = {"beg": {"LLA": 3}, "mid": {}, "end": {}, "all": {}, "upper": "L", "lower": "l"}


class _StubClient:
    def __init__(self, routes) -> None:
        self.base_url = "https://languages.invalid"
        self.routes = routes
        self.paths = []
        self.closed = False

    def get(self, path, params=None, headers=None):
        self.paths.append(path)
        route = self.routes.get(path)
        if isinstance(route, Exception):
            raise route
        request = httpx.Request("GET", f"https://languages.invalid{path}")
        if route is None:
            return httpx.Response(404, json={"detail": "missing"}, request=request)
        return httpx.Response(200, json=route, request=request)

    def close(self) -> None:
        self.closed = True


class FileLanguageSourceTests(unittest.TestCase):
    def test_json_dictionary_wins_over_word_list(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "welsh.txt").write_text("Llewelyn\nGwen\n", encoding="utf-8")
            (root / "welsh.json").write_text(json.dumps(WELSH), encoding="utf-8")
            (root / "irish.txt").write_text("# names\nSeamus\nSiobhan\n", encoding="utf-8")
            source = FileLanguageSource(root)

            self.assertEqual(["irish", "welsh"], source.available_keys())
            self.assertEqual({"LLA": 3}, source.load("welsh")["beg"])
            self.assertEqual({"SEA": 1, "SIO": 1}, source.load("irish")["beg"])

    def test_unknown_key_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(KeyError):
                FileLanguageSource(tmp).load("klingon")

    def test_missing_directory_has_no_languages(self) -> None:
        self.assertEqual([], FileLanguageSource("/nonexistent/tokenmold/languages").available_keys())

    def test_bundled_languages_build_valid_models(self) -> None:
        source = FileLanguageSource()
        self.assertIn("english", source.available_keys())
        for key in source.available_keys():
            model = LanguageModel.from_mapping(key, source.load(key))
            self.assertTrue(model.beg, key)

    def test_default_creature_languages_are_all_bundled(self) -> None:
        bundled = set(FileLanguageSource().available_keys())
        for rule in DND_DEFAULT_NAME_OPTIONS["attributes"]:
            for language in rule["languages"].values():
                self.assertIn(language, bundled)


class HttpLanguageSourceTests(unittest.TestCase):
    def tearDown(self) -> None:
        reset_circuit_breakers()

    def test_keys_come_from_index(self) -> None:
        client = _StubClient({"/index.json": {"languages": ["welsh", "irish"]}})
        source = HttpLanguageSource("https://languages.invalid", http_client=client)
        self.assertEqual(["irish", "welsh"], source.available_keys())
        self.assertEqual(["irish", "welsh"], source.available_keys())
        self.assertEqual(["/index.json"], client.paths)

    def test_explicit_keys_skip_index(self) -> None:
        client = _StubClient({})
        source = HttpLanguageSource("https://languages.invalid", keys=["welsh"], http_client=client)
        self.assertEqual(["welsh"], source.available_keys())
        self.assertEqual([], client.paths)

    def test_load_caches_payload(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            client = _StubClient({"/welsh.json": WELSH})
            source = HttpLanguageSource(
                "https://languages.invalid",
                keys=["welsh"],
                cache=FileContentCache(tmp, data_version="1"),
                http_client=client,
            )
            self.assertEqual(WELSH, source.load("welsh"))
            self.assertEqual(WELSH, source.load("welsh"))
            self.assertEqual(["/welsh.json"], client.paths)

    def test_failed_fetch_falls_back_to_stale_cache(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cache = FileContentCache(tmp, data_version="1")
            cache.set("language:welsh", WELSH)
            path = cache._path_for_key("language:welsh")
            envelope = json.loads(path.read_text(encoding="utf-8"))
            envelope["stored_at"] = 0
            path.write_text(json.dumps(envelope), encoding="utf-8")
            client = _StubClient({"/welsh.json": httpx.ConnectError("down")})
            source = HttpLanguageSource(
                "https://languages.invalid",
                keys=["welsh"],
                cache=cache,
                cache_ttl_seconds=60,
                retries=0,
                http_client=client,
            )
            with self.assertLogs("tokenmold.infrastructure.language_data.http_language_source", level="WARNING"):
                self.assertEqual(WELSH, source.load("welsh"))

    def test_failed_fetch_without_cache_raises(self) -> None:
        client = _StubClient({})
        source = HttpLanguageSource("https://languages.invalid", keys=["welsh"], retries=0, http_client=client)
        with self.assertRaises(httpx.HTTPStatusError):
            source.load("welsh")
        source.close()
        self.assertTrue(client.closed)


class FileAdjectiveSourceTests(unittest.TestCase):
    def test_reads_tables_and_skips_comments(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "grim.txt").write_text("# grim words\nBleak\n\nDour\n", encoding="utf-8")
            source = FileAdjectiveSource(tmp)
            self.assertEqual(["grim"], source.list_tables())
            self.assertEqual(["Bleak", "Dour"], source.words("grim"))
            self.assertEqual([], source.words("cheerful"))

    def test_bundled_english_table(self) -> None:
        source = FileAdjectiveSource()
        self.assertIn("english", source.list_tables())
        self.assertTrue(source.words("english"))


if __name__ == "__main__":
    unittest.main()
