import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from tokenmold.application.mappers.settings_mapper import parse_settings
from tokenmold.application.services.event_bus import EventBus
from tokenmold.application.services.hp_randomizer import SUPPORTED_SYSTEMS, HpRandomizer, RollPublisher
from tokenmold.application.services.language_registry import KNOWN_LANGUAGES, LanguageRegistry
from tokenmold.application.services.name_composer import NameComposer
from tokenmold.application.services.seed_policy import session_rng
from tokenmold.application.services.sequence_counter import CounterState, SequenceCounter
from tokenmold.application.services.token_mold_handlers import register_token_mold_handlers
from tokenmold.application.services.token_mold_service import TokenMoldService
from tokenmold.domain.repositories import LanguageSource, SceneTokenRepository
from tokenmold.domain.services.markov_name_model import MarkovNameModel
from tokenmold.infrastructure.adjectives.file_adjective_source import FileAdjectiveSource
from tokenmold.infrastructure.content_cache import FileContentCache
from tokenmold.infrastructure.dice.formula_roller import FormulaDiceRoller
from tokenmold.infrastructure.inmemory.inmemory_scene_token_repo import InMemorySceneTokenRepository
from tokenmold.infrastructure.language_data import FileLanguageSource, HttpLanguageSource

INDEX_KEYS = "index"

_logger = logging.getLogger(__name__)


def _env_path(name: str) -> Optional[Path]:
    value = os.getenv(name, "").strip()
    return Path(value) if value else None


def load_settings_document(path: Path | None = None) -> Dict[str, Any]:
    settings_path = path or _env_path("TOKENMOLD_SETTINGS_PATH")
    if settings_path is None:
        return {}
    return json.loads(settings_path.read_text(encoding="utf-8"))


def _language_keys() -> Optional[List[str]]:
    """Keys served by the HTTP source: the known list by default, the remote index, or an explicit list."""
    raw = os.getenv("TOKENMOLD_LANGUAGE_KEYS", "").strip()
    if not raw:
        return list(KNOWN_LANGUAGES)
    if raw == INDEX_KEYS:
        return None
    return [key.strip() for key in raw.split(",") if key.strip()]


def build_language_source() -> LanguageSource:
    base_url = os.getenv("TOKENMOLD_LANGUAGE_URL", "").strip()
    if not base_url:
        return FileLanguageSource(_env_path("TOKENMOLD_LANGUAGE_DIR"))

    cache_dir = _env_path("TOKENMOLD_LANGUAGE_CACHE_DIR")
    cache = FileContentCache(cache_dir) if cache_dir is not None else None
    return HttpLanguageSource(
        base_url,
        keys=_language_keys(),
        cache=cache,
        cache_ttl_seconds=int(os.getenv("TOKENMOLD_LANGUAGE_CACHE_TTL_S", str(7 * 86400))),
        timeout=float(os.getenv("TOKENMOLD_HTTP_TIMEOUT_S", "5")),
        retries=int(os.getenv("TOKENMOLD_HTTP_RETRIES", "1")),
        backoff_seconds=float(os.getenv("TOKENMOLD_HTTP_BACKOFF_S", "0.2")),
    )


def build_token_repo() -> SceneTokenRepository:
    if not os.getenv("TOKENMOLD_DATABASE_URL", "").strip():
        return InMemorySceneTokenRepository()

    from tokenmold.infrastructure.db.sql.connection import engine
    from tokenmold.infrastructure.db.sql.repos import SqlSceneTokenRepository, ensure_schema

    ensure_schema(engine)
    return SqlSceneTokenRepository()


def create_token_mold_service(
    *,
    settings_document: Mapping[str, Any] | None = None,
    seed: Any | None = None,
    language_source: LanguageSource | None = None,
    token_repo: SceneTokenRepository | None = None,
    notify: Callable[[str], None] | None = None,
    publish_roll: RollPublisher | None = None,
) -> TokenMoldService:
    system_id = os.getenv("TOKENMOLD_SYSTEM_ID", "dnd5e").strip() or "dnd5e"
    if system_id not in SUPPORTED_SYSTEMS:
        _logger.warning("Unsupported game system; size and hp stages stay off", extra={"system_id": system_id})
    document = settings_document if settings_document is not None else load_settings_document()
    settings = parse_settings(document, system_id=system_id)

    rng = session_rng(seed if seed is not None else os.getenv("TOKENMOLD_SEED"))
    resolved_repo = token_repo or build_token_repo()
    registry = LanguageRegistry(language_source or build_language_source())
    counter = SequenceCounter(CounterState(), resolved_repo, rng)
    composer = NameComposer(counter, registry, MarkovNameModel(rng), rng)
    hp_randomizer = HpRandomizer(FormulaDiceRoller(rng), system_id=system_id, notify=notify, publish_roll=publish_roll)

    return TokenMoldService(
        settings=settings,
        composer=composer,
        hp_randomizer=hp_randomizer,
        adjective_source=FileAdjectiveSource(_env_path("TOKENMOLD_ADJECTIVE_DIR")),
        token_repo=resolved_repo,
        system_id=system_id,
        rng=rng,
    )


def create_event_bus(service: TokenMoldService) -> EventBus:
    event_bus = EventBus()
    register_token_mold_handlers(event_bus, service)
    return event_bus
