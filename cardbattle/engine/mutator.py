# cardbattle/engine/mutator.py
import copy
from typing import Any, Callable, Dict, List, Optional, Tuple

from .catalog import CardCatalog
from .dice import rng_for
from .errors import BattleError
from .models import ActionResult, AttackPreview, Battle, PlayerBattleState, UnitStats
from .passives import empower_attacker, fortify_defender
from .resolver import resolve_attack
from .rules import clamp
from .turns import (
    apply_end_turn,
    can_attack_this_round,
    check_actor,
    check_battle_end,
    opponent_of,
    record,
    resume_battle_phase,
)
from ..content.balance import CAPS, DEFAULTS, SLOTS

PLAYER_TARGET = "player"

# extremes of random.random(); a chance effect procs when draw * 100 < chance
LOWEST_DRAW = 0.0
HIGHEST_DRAW = 1.0 - 2 ** -53


def slot_of(ps: PlayerBattleState, unit_id: str) -> Optional[str]:
    for slot in SLOTS:
        if ps.battlefield.get(slot) == unit_id:
            return slot
    return None


def unit_health(battle: Battle, unit_id: str, stats: UnitStats) -> int:
    return battle.card_healths.get(unit_id, stats.health)


def default_rng(battle: Battle) -> Callable[[], float]:
    # the draw belongs to the version this action will be committed as
    return rng_for(battle.seed, battle.version + 1).random


def _plan_attack(
    battle: Battle,
    attacker_id: str,
    attacker_unit_id: str,
    target: str,
    catalog: CardCatalog,
) -> Tuple[Optional[BattleError], Dict[str, Any]]:
    """Validates an attack against the snapshot; returns (error, plan)."""
    error = check_actor(battle, attacker_id)
    if error:
        return error, {}
    if not can_attack_this_round(battle):
        return BattleError.ATTACK_TOO_EARLY, {}

    ps = battle.players[attacker_id]
    slot = slot_of(ps, attacker_unit_id) if attacker_unit_id else None
    if not slot:
        return BattleError.UNIT_NOT_FOUND, {}
    if ps.battlefield_attacks.get(slot):
        return BattleError.ALREADY_ATTACKED, {}
    if target != PLAYER_TARGET and target not in SLOTS:
        return BattleError.INVALID_SLOT, {}

    attacker_stats = catalog.get_card_stats(battle.units.get(attacker_unit_id, ""))
    if attacker_stats is None:
        return BattleError.CARD_NOT_FOUND, {}

    opponent_id = opponent_of(battle, attacker_id)
    opponent = battle.players[opponent_id]
    plan: Dict[str, Any] = {
        "slot": slot,
        "attacker_stats": attacker_stats,
        "attacker_health": unit_health(battle, attacker_unit_id, attacker_stats),
        "opponent_id": opponent_id,
        "target_slot": None,
        "target_unit_id": None,
        "defender_stats": None,
        "defender_health": None,
    }

    target_unit_id = opponent.battlefield.get(target) if target in SLOTS else None
    if target_unit_id:
        defender_stats = catalog.get_card_stats(battle.units.get(target_unit_id, ""))
        if defender_stats is None:
            return BattleError.CARD_NOT_FOUND, {}
        defender_health = unit_health(battle, target_unit_id, defender_stats)
        if defender_health <= 0:
            return BattleError.SLOT_EMPTY, {}
        plan.update({
            "target_slot": target,
            "target_unit_id": target_unit_id,
            "defender_stats": defender_stats,
            "defender_health": defender_health,
        })
    return None, plan


def _resolve_plan(plan: Dict[str, Any], rng: Callable[[], float], trace: List[str]):
    attacker = empower_attacker(plan["attacker_stats"], rng, plan["attacker_health"], trace)
    defender = plan["defender_stats"]
    if defender is not None:
        defender = fortify_defender(defender, attacker)
    return resolve_attack(attacker, defender, rng, defender_health=plan["defender_health"])


def preview_attack(
    battle: Battle,
    attacker_id: str,
    attacker_unit_id: str,
    target: str,
    catalog: Optional[CardCatalog] = None,
) -> ActionResult:
    """
    Same validation and damage formula as apply_attack, without rolling.

    The low end resolves with the highest possible draw and the high end with
    the lowest, so the range is independent of the battle seed and says
    nothing about the roll the commit will make.
    The battle is returned untouched.
    """
    catalog = catalog or CardCatalog()
    error, plan = _plan_attack(battle, attacker_id, attacker_unit_id, target, catalog)
    if error:
        return ActionResult.failed(battle, error)

    trace: List[str] = []
    low = _resolve_plan(plan, lambda: HIGHEST_DRAW, trace)
    high = _resolve_plan(plan, lambda: LOWEST_DRAW, [])
    chance = empower_attacker(plan["attacker_stats"], lambda: HIGHEST_DRAW, plan["attacker_health"]).critical_chance

    preview = AttackPreview(
        damage_min=low.damage,
        damage_max=high.damage,
        critical_chance=chance,
        destroys=low.destroyed,
        may_destroy=high.destroyed,
    )
    message = " ".join(trace + [low.narrative])
    if high.damage != low.damage:
        message += f" Up to {high.damage} damage on a lucky roll ({chance}% critical chance)."
    return ActionResult.succeeded(battle, message=message, preview=preview)


def apply_attack(
    battle: Battle,
    attacker_id: str,
    attacker_unit_id: str,
    target: str,
    catalog: Optional[CardCatalog] = None,
    rng: Optional[Callable[[], float]] = None,
) -> ActionResult:
    """
    Resolves one unit attack and returns the updated snapshot.
    target is an opposing slot ("left" | "center" | "right") or "player";
    an empty slot is a direct attack on the opposing player.
    """
    catalog = catalog or CardCatalog()
    error, plan = _plan_attack(battle, attacker_id, attacker_unit_id, target, catalog)
    if error:
        return ActionResult.failed(battle, error)

    trace: List[str] = []
    outcome = _resolve_plan(plan, rng or default_rng(battle), trace)

    updated = copy.deepcopy(battle)
    resume_battle_phase(updated)
    ps = updated.players[attacker_id]
    opponent = updated.players[plan["opponent_id"]]
    attacker_name = plan["attacker_stats"].name
    target_unit_id = plan["target_unit_id"]

    if target_unit_id:
        if outcome.destroyed:
            opponent.battlefield[plan["target_slot"]] = None
            updated.card_healths.pop(target_unit_id, None)
            updated.units.pop(target_unit_id, None)
        else:
            updated.card_healths[target_unit_id] = plan["defender_health"] - outcome.damage
        target_text = plan["defender_stats"].name
    else:
        opponent.hp = clamp(opponent.hp - outcome.damage, CAPS["hp_min"], CAPS["hp_max"])
        target_text = opponent.display_name

    ps.battlefield_attacks[plan["slot"]] = True
    if outcome.damage > 0:
        updated.phase = "damage"

    line = f"{ps.display_name}'s {attacker_name} attacks {target_text}. " + " ".join(trace + [outcome.narrative])
    record(updated, attacker_id, "attack", line.strip(), card_id=updated.units.get(attacker_unit_id), damage=outcome.damage)

    check_battle_end(updated, acting_player=attacker_id)
    return ActionResult.succeeded(updated, message=outcome.narrative, outcome=outcome)


def apply_place_card(
    battle: Battle,
    player_id: str,
    card_id: str,
    position: str,
    catalog: Optional[CardCatalog] = None,
) -> ActionResult:
    catalog = catalog or CardCatalog()
    error = check_actor(battle, player_id)
    if error:
        return ActionResult.failed(battle, error)
    if position not in SLOTS:
        return ActionResult.failed(battle, BattleError.INVALID_SLOT)

    ps = battle.players[player_id]
    if ps.battlefield.get(position):
        return ActionResult.failed(battle, BattleError.SLOT_OCCUPIED)
    if card_id not in ps.hand:
        return ActionResult.failed(battle, BattleError.CARD_NOT_FOUND, message="That card is not in your hand.")
    stats = catalog.get_card_stats(card_id)
    if stats is None:
        return ActionResult.failed(battle, BattleError.CARD_NOT_FOUND)
    cost = DEFAULTS["placement_cost"]
    if ps.energy < cost:
        return ActionResult.failed(battle, BattleError.INSUFFICIENT_ENERGY)

    updated = copy.deepcopy(battle)
    resume_battle_phase(updated)
    ps = updated.players[player_id]
    updated.unit_seq += 1
    unit_id = f"{card_id}#{updated.unit_seq}"
    updated.units[unit_id] = card_id
    ps.battlefield[position] = unit_id
    ps.hand.remove(card_id)
    ps.energy = clamp(ps.energy - cost, CAPS["energy_min"], CAPS["energy_max"])
    ps.cards_played_this_round += 1

    record(updated, player_id, "place_card", f"{ps.display_name} placed {stats.name} in {position} position.", card_id=card_id)
    return ActionResult.succeeded(updated, message=f"Placed {stats.name} in {position} position.")


def apply_cast_spell(
    battle: Battle,
    player_id: str,
    spell_id: str,
    target: Optional[str] = None,
    catalog: Optional[CardCatalog] = None,
) -> ActionResult:
    catalog = catalog or CardCatalog()
    error = check_actor(battle, player_id)
    if error:
        return ActionResult.failed(battle, error)

    ps = battle.players[player_id]
    if spell_id not in ps.spell_deck:
        return ActionResult.failed(battle, BattleError.CARD_NOT_FOUND, message="Spell not available in your deck.")
    spell = catalog.get_spell_stats(spell_id)
    if spell is None:
        return ActionResult.failed(battle, BattleError.CARD_NOT_FOUND)
    remaining = ps.spell_cooldowns.get(spell_id, 0)
    if remaining > 0:
        return ActionResult.failed(
            battle,
            BattleError.SPELL_ON_COOLDOWN,
            message=f"Spell will be available in {remaining} rounds.",
        )
    if ps.energy < spell.cost:
        return ActionResult.failed(battle, BattleError.INSUFFICIENT_ENERGY)

    updated = copy.deepcopy(battle)
    resume_battle_phase(updated)
    ps = updated.players[player_id]
    ps.energy = clamp(ps.energy - spell.cost, CAPS["energy_min"], CAPS["energy_max"])
    ps.spell_cooldowns[spell_id] = DEFAULTS["spell_cooldown"]

    target_text = ""
    if target and target in updated.players:
        target_text = f" on {updated.players[target].display_name}"
    elif target:
        target_text = f" on {target}"
    record(updated, player_id, "cast_spell", f"{ps.display_name} casts {spell.name}{target_text}.", card_id=spell_id)
    return ActionResult.succeeded(updated, message=f"Cast {spell.name}.")


def apply_action(
    battle: Battle,
    action: Dict[str, Any],
    catalog: Optional[CardCatalog] = None,
    rng: Optional[Callable[[], float]] = None,
) -> ActionResult:
    """
    Dispatches {"type": attack|place_card|cast_spell|end_turn, "actor_id", "payload"}.
    Attack payloads name the attacker by "unit_id" or by its "slot".
    """
    catalog = catalog or CardCatalog()
    kind = action.get("type")
    actor_id = action.get("actor_id", "")
    payload = action.get("payload") or {}

    if kind == "attack":
        unit_id = payload.get("unit_id")
        slot = payload.get("slot")
        if not unit_id and slot:
            error = check_actor(battle, actor_id)
            if error:
                return ActionResult.failed(battle, error)
            if slot not in SLOTS:
                return ActionResult.failed(battle, BattleError.INVALID_SLOT)
            unit_id = battle.players[actor_id].battlefield.get(slot)
            if not unit_id:
                return ActionResult.failed(battle, BattleError.SLOT_EMPTY)
        return apply_attack(battle, actor_id, unit_id or "", payload.get("target", PLAYER_TARGET), catalog, rng)
    if kind == "place_card":
        return apply_place_card(battle, actor_id, payload.get("card_id", ""), payload.get("position", ""), catalog)
    if kind == "cast_spell":
        return apply_cast_spell(battle, actor_id, payload.get("spell_id", ""), payload.get("target"), catalog)
    if kind == "end_turn":
        return apply_end_turn(battle, actor_id, catalog)
    return ActionResult.failed(battle, BattleError.INVALID_ACTION)
