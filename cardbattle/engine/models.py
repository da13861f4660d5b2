# cardbattle/engine/models.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .errors import BattleError, error_message
from ..content.balance import DEFAULTS


@dataclass(frozen=True)
class UnitStats:
    card_id: str
    name: str
    unit_class: str = "melee"             # "melee" | "ranged" | "mage"
    attack: int = 0
    defense: int = 0
    health: int = 1                       # static max health, never mutated
    critical_chance: int = 0
    critical_damage: int = 100
    ranged_resistance: int = 0
    melee_resistance: int = 0
    magic_resistance: int = 0
    passives: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SpellStats:
    card_id: str
    name: str
    cost: int = 0
    spell_type: str = "other"
    description: str = ""


@dataclass(frozen=True)
class AttackOutcome:
    damage: int
    is_critical: bool
    destroyed: bool
    narrative: str


@dataclass(frozen=True)
class AttackPreview:
    """Damage range for an attack, computed without rolling."""
    damage_min: int
    damage_max: int
    critical_chance: int
    destroys: bool          # lethal even without a critical hit
    may_destroy: bool       # lethal on the best roll


@dataclass
class PlayerBattleState:
    player_id: str
    display_name: str = ""
    hp: int = DEFAULTS["hp"]
    energy: int = DEFAULTS["energy"]
    deck: List[str] = field(default_factory=list)
    hand: List[str] = field(default_factory=list)
    spell_deck: List[str] = field(default_factory=list)
    spell_cooldowns: Dict[str, int] = field(default_factory=dict)
    battlefield: Dict[str, Optional[str]] = field(default_factory=lambda: {
        "left": None,
        "center": None,
        "right": None,
    })
    battlefield_attacks: Dict[str, bool] = field(default_factory=lambda: {
        "left": False,
        "center": False,
        "right": False,
    })
    cards_played_this_round: int = 0
    is_ai: bool = False


@dataclass
class Battle:
    battle_id: str
    players: Dict[str, PlayerBattleState] = field(default_factory=dict)
    turn_order: List[str] = field(default_factory=list)     # turn_order[0] starts every round
    current_turn: Optional[str] = None
    current_round: int = 1
    status: str = "waiting"                                  # "waiting" | "active" | "finished"
    phase: str = "preparation"                               # "preparation" | "battle" | "damage" | "finished"
    card_healths: Dict[str, int] = field(default_factory=dict)   # unit id -> runtime health
    units: Dict[str, str] = field(default_factory=dict)          # unit id -> card id
    unit_seq: int = 0
    winner: Optional[str] = None                             # player id | "tie" | None
    seed: int = 0
    version: int = 0
    log: List[str] = field(default_factory=list)
    history: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class ActionResult:
    ok: bool
    battle: Battle
    error: Optional[BattleError] = None
    outcome: Optional[AttackOutcome] = None
    message: str = ""
    preview: Optional[AttackPreview] = None

    @classmethod
    def failed(cls, battle: Battle, error: BattleError, message: str = "") -> "ActionResult":
        return cls(ok=False, battle=battle, error=error, message=message or error_message(error))

    @classmethod
    def succeeded(
        cls,
        battle: Battle,
        message: str = "",
        outcome: Optional[AttackOutcome] = None,
        preview: Optional[AttackPreview] = None,
    ) -> "ActionResult":
        return cls(ok=True, battle=battle, outcome=outcome, message=message, preview=preview)
