# cardbattle/engine/resolver.py
from typing import Callable, List, Optional

from .models import AttackOutcome, UnitStats
from .rules import percent_of, resistance_against


def roll_critical(attacker: UnitStats, rng: Callable[[], float]) -> bool:
    return rng() * 100 < attacker.critical_chance


def resolve_attack(
    attacker: UnitStats,
    defender: Optional[UnitStats],
    rng: Callable[[], float],
    defender_health: Optional[int] = None,
) -> AttackOutcome:
    """
    Resolves a single attack. Pure: draws exactly one value from rng and
    touches no battle state.

    Order: critical roll, resistance (by attacker class), flat defense,
    lethality against the defender's current health. A direct attack
    (defender is None) stops after the critical roll and never destroys.
    Both the preview and the commit paths call this function; only the
    commit path passes a seeded rng.
    """
    base = max(0, attacker.attack)
    damage = base
    is_critical = roll_critical(attacker, rng)
    trace: List[str] = []

    if is_critical:
        damage = base + percent_of(base, attacker.critical_damage)
        trace.append(f"Critical Hit! Base {base} + {attacker.critical_damage}% = {damage} damage.")
    else:
        trace.append(f"{attacker.name} strikes for {damage} damage.")

    if defender is None:
        trace.append(f"Direct attack for {damage} damage to player.")
        return AttackOutcome(damage=damage, is_critical=is_critical, destroyed=False, narrative=" ".join(trace))

    resistance = resistance_against(defender, attacker.unit_class)
    resisted = percent_of(damage, resistance)
    damage = max(0, damage - resisted)
    damage = max(0, damage - defender.defense)
    trace.append(
        f"After {resistance}% {attacker.unit_class} resistance (-{resisted}) "
        f"and {defender.defense} defense: {damage} final damage."
    )

    current_health = defender.health if defender_health is None else defender_health
    destroyed = damage >= current_health
    if destroyed:
        trace.append(f"{defender.name} destroyed!")

    return AttackOutcome(damage=damage, is_critical=is_critical, destroyed=destroyed, narrative=" ".join(trace))
