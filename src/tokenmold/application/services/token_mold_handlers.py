from __future__ import annotations

from tokenmold.application.services.event_bus import EventBus
from tokenmold.application.services.token_mold_service import TokenMoldService
from tokenmold.domain.events import SceneCountersReset, TokenCreated, TokenPlacementRequested


class TokenMoldHandlers:
    """Hook-style adapter: fills each event's ``patch`` from the service."""

    def __init__(self, service: TokenMoldService, event_bus: EventBus) -> None:
        self.service = service
        self.event_bus = event_bus

    def register_handlers(self) -> None:
        self.event_bus.subscribe(TokenPlacementRequested, self.on_placement_requested, priority=20)
        self.event_bus.subscribe(TokenCreated, self.on_token_created, priority=20)
        self.event_bus.subscribe(SceneCountersReset, self.on_counters_reset, priority=20)

    def on_placement_requested(self, event: TokenPlacementRequested) -> None:
        patch = self.service.prepare_token(
            event.scene_id,
            event.grid,
            event.placement,
            event.actor,
            modifier_active=event.modifier_active,
        )
        event.patch.update(patch.to_dict())
        if "name" in patch:
            event.placement.name = patch.get("name")

    def on_token_created(self, event: TokenCreated) -> None:
        patch = self.service.on_token_created(
            event.scene_id,
            event.placement,
            event.actor,
            created_by_current_user=event.created_by_current_user,
        )
        event.patch.update(patch.to_dict())

    def on_counters_reset(self, event: SceneCountersReset) -> None:
        self.service.reset_scene(
            event.scene_id,
            reseed_actor_ids=list(event.reseed_actor_ids) or None,
            reseed_from_history=event.reseed_from_history,
        )


def register_token_mold_handlers(event_bus: EventBus, service: TokenMoldService | None) -> TokenMoldHandlers | None:
    if service is None:
        return None
    handlers = TokenMoldHandlers(service, event_bus)
    handlers.register_handlers()
    return handlers
