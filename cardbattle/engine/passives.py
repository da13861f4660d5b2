# cardbattle/engine/passives.py
from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from .models import UnitStats
from .rules import clamp, percent_of
from ..content.balance import CAPS
from ..content.passives import PASSIVE_ABILITIES


def passive_effects(stats: UnitStats) -> List[Dict[str, Any]]:
    """Effect dicts for the unit's known passives; unknown ids are skipped."""
    effects: List[Dict[str, Any]] = []
    for passive_id in stats.passives:
        passive = PASSIVE_ABILITIES.get(passive_id)
        if not passive:
            continue
        effect = dict(passive.get("effect", {}) or {})
        effect["passive_id"] = passive_id
        effect["name"] = passive.get("name", passive_id)
        effects.append(effect)
    return effects


def _percent(value: int) -> int:
    return clamp(value, CAPS["percent_min"], CAPS["percent_max"])


def empower_attacker(
    attacker: UnitStats,
    rng: Callable[[], float],
    current_health: Optional[int] = None,
    log: Optional[List[str]] = None,
) -> UnitStats:
    """
    Applies the attacker's offensive passives and returns modified stats.
    Chance-based passives draw from rng before the resolver's critical roll.
    """
    attack = attacker.attack
    crit_chance = attacker.critical_chance
    crit_damage = attacker.critical_damage

    for effect in passive_effects(attacker):
        kind = effect.get("type")
        if kind == "crit_chance":
            crit_chance = _percent(crit_chance + int(effect.get("bonus", 0) or 0))
        elif kind == "crit_damage":
            crit_damage = max(0, crit_damage + int(effect.get("bonus", 0) or 0))
        elif kind == "attack_per_missing_hp":
            health_now = attacker.health if current_health is None else current_health
            missing = max(0, attacker.health - health_now)
            bonus = missing * int(effect.get("multiplier", 1) or 0)
            if bonus > 0:
                attack += bonus
                if log is not None:
                    log.append(f"{effect['name']} adds {bonus} attack.")
        elif kind == "damage_bonus":
            if rng() * 100 < int(effect.get("chance", 0) or 0):
                bonus = int(effect.get("bonus", 0) or 0)
                attack += bonus
                if log is not None:
                    log.append(f"{effect['name']} flares for +{bonus} damage.")

    if (attack, crit_chance, crit_damage) == (attacker.attack, attacker.critical_chance, attacker.critical_damage):
        return attacker
    return replace(attacker, attack=attack, critical_chance=crit_chance, critical_damage=crit_damage)


def fortify_defender(defender: UnitStats, attacker: UnitStats) -> UnitStats:
    """Applies the defender's defensive passives, then the attacker's defense-ignoring ones."""
    defense = defender.defense
    magic_resistance = defender.magic_resistance

    for effect in passive_effects(defender):
        kind = effect.get("type")
        if kind == "damage_reduction":
            defense += int(effect.get("amount", 0) or 0)
        elif kind == "magic_resistance":
            magic_resistance = _percent(magic_resistance + int(effect.get("bonus", 0) or 0))

    for effect in passive_effects(attacker):
        if effect.get("type") == "defense_ignore":
            defense = max(0, defense - percent_of(defense, int(effect.get("percentage", 0) or 0)))

    if (defense, magic_resistance) == (defender.defense, defender.magic_resistance):
        return defender
    return replace(defender, defense=defense, magic_resistance=magic_resistance)


def regen_amount(stats: UnitStats) -> int:
    return sum(
        int(effect.get("amount", 0) or 0)
        for effect in passive_effects(stats)
        if effect.get("type") == "health_regen"
    )
