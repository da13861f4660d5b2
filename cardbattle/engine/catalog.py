# cardbattle/engine/catalog.py
from typing import Any, Dict, Mapping, Optional

from .models import SpellStats, UnitStats
from .rules import clamp
from ..content.balance import CAPS, DEFAULTS, UNIT_CLASSES
from ..content.cards import CARDS


def _int(data: Mapping[str, Any], key: str, default: int = 0) -> int:
    value = data.get(key)
    if value is None:
        return default
    return int(value)


def _percent(data: Mapping[str, Any], key: str, default: int = 0) -> int:
    return clamp(_int(data, key, default), CAPS["percent_min"], CAPS["percent_max"])


def unit_stats_from_card(card_id: str, data: Mapping[str, Any]) -> UnitStats:
    """
    Builds immutable combat stats from a catalog card dict.
    Missing stats fall back to 0, critical damage to 100% and health to 1.
    """
    unit_class = data.get("class") or "melee"
    if unit_class not in UNIT_CLASSES:
        unit_class = "melee"
    passives = data.get("passiveAbilities") or []
    legacy = data.get("passiveSkill")
    if legacy and legacy not in passives:
        passives = list(passives) + [legacy]
    return UnitStats(
        card_id=card_id,
        name=str(data.get("name", card_id)),
        unit_class=unit_class,
        attack=max(0, _int(data, "attack")),
        defense=max(0, _int(data, "defense")),
        health=max(0, _int(data, "health", DEFAULTS["health"])),
        critical_chance=_percent(data, "criticalChance"),
        critical_damage=max(0, _int(data, "criticalDamage", DEFAULTS["critical_damage"])),
        ranged_resistance=_percent(data, "rangedResistance"),
        melee_resistance=_percent(data, "meleeResistance"),
        magic_resistance=_percent(data, "magicResistance"),
        passives=tuple(passives),
    )


class CardCatalog:
    """Read-only card lookup. Battle cards resolve to UnitStats, ability cards to SpellStats."""

    def __init__(self, cards: Optional[Dict[str, Dict[str, Any]]] = None):
        self._cards = dict(CARDS if cards is None else cards)
        self._units: Dict[str, UnitStats] = {}

    def __contains__(self, card_id: str) -> bool:
        return card_id in self._cards

    def card(self, card_id: str) -> Optional[Dict[str, Any]]:
        return self._cards.get(card_id)

    def all_cards(self) -> Dict[str, Dict[str, Any]]:
        return {card_id: dict(data) for card_id, data in self._cards.items()}

    def get_card_stats(self, card_id: str) -> Optional[UnitStats]:
        data = self._cards.get(card_id)
        if not data or data.get("type", "battle") != "battle":
            return None
        stats = self._units.get(card_id)
        if stats is None:
            stats = unit_stats_from_card(card_id, data)
            self._units[card_id] = stats
        return stats

    def get_spell_stats(self, card_id: str) -> Optional[SpellStats]:
        data = self._cards.get(card_id)
        if not data or data.get("type") != "ability":
            return None
        return SpellStats(
            card_id=card_id,
            name=str(data.get("name", card_id)),
            cost=max(0, _int(data, "cost")),
            spell_type=str(data.get("spellType", "other")),
            description=str(data.get("description", "")),
        )
