# cardbattle/engine/ai.py
from typing import Callable, Optional

from .catalog import CardCatalog
from .dice import rng_for
from .models import ActionResult, Battle
from .mutator import PLAYER_TARGET, apply_attack, apply_place_card, unit_health
from .turns import apply_end_turn, can_attack_this_round, opponent_of
from ..content.balance import DEFAULTS, SLOTS


def _pick_target(battle: Battle, ai_id: str, catalog: CardCatalog) -> str:
    """Weakest enemy unit by runtime health, else the opposing player."""
    enemy = battle.players[opponent_of(battle, ai_id)]
    best_slot, best_health = PLAYER_TARGET, None
    for slot in SLOTS:
        unit_id = enemy.battlefield.get(slot)
        if not unit_id:
            continue
        stats = catalog.get_card_stats(battle.units.get(unit_id, ""))
        if stats is None:
            continue
        health = unit_health(battle, unit_id, stats)
        if best_health is None or health < best_health:
            best_slot, best_health = slot, health
    return best_slot


def _place_one(battle: Battle, ai_id: str, catalog: CardCatalog) -> Battle:
    ps = battle.players[ai_id]
    if ps.energy < DEFAULTS["placement_cost"]:
        return battle
    free = [slot for slot in SLOTS if not ps.battlefield.get(slot)]
    if not free:
        return battle
    for card_id in list(ps.hand):
        if catalog.get_card_stats(card_id) is None:
            continue
        result = apply_place_card(battle, ai_id, card_id, free[0], catalog)
        if result.ok:
            return result.battle
    return battle


def play_ai_turn(
    battle: Battle,
    ai_id: str,
    catalog: Optional[CardCatalog] = None,
    rng: Optional[Callable[[], float]] = None,
) -> ActionResult:
    """
    Fixed AI profile: place one unit if affordable, attack with every ready
    unit, then end the turn. All steps land in a single committed snapshot.
    """
    catalog = catalog or CardCatalog()
    rng = rng or rng_for(battle.seed, battle.version + 1).random
    current = _place_one(battle, ai_id, catalog)

    if can_attack_this_round(current):
        for slot in SLOTS:
            if current.status != "active":
                break
            ps = current.players[ai_id]
            unit_id = ps.battlefield.get(slot)
            if not unit_id or ps.battlefield_attacks.get(slot):
                continue
            result = apply_attack(current, ai_id, unit_id, _pick_target(current, ai_id, catalog), catalog, rng)
            if result.ok:
                current = result.battle

    if current.status != "active":
        return ActionResult.succeeded(current, message="AI turn ended the battle.")
    return apply_end_turn(current, ai_id, catalog)
