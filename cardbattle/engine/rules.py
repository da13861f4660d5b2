# cardbattle/engine/rules.py
from .models import UnitStats


def clamp(x: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, x))


def percent_of(value: int, percent: int) -> int:
    # half-up rounding of value * percent / 100 for non-negative inputs
    return (value * percent + 50) // 100


def resistance_against(defender: UnitStats, attacker_class: str) -> int:
    """Defender resistance selected by the attacker's class."""
    if attacker_class == "melee":
        return defender.melee_resistance
    if attacker_class == "ranged":
        return defender.ranged_resistance
    if attacker_class == "mage":
        return defender.magic_resistance
    return 0
