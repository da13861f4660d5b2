# cardbattle/engine/errors.py
from enum import Enum


class BattleError(str, Enum):
    """Expected, caller-recoverable failure kinds for battle actions."""

    NOT_YOUR_TURN = "not_your_turn"
    ATTACK_TOO_EARLY = "attack_too_early"
    INVALID_SLOT = "invalid_slot"
    SLOT_OCCUPIED = "slot_occupied"
    SLOT_EMPTY = "slot_empty"
    ALREADY_ATTACKED = "already_attacked"
    INSUFFICIENT_ENERGY = "insufficient_energy"
    SPELL_ON_COOLDOWN = "spell_on_cooldown"
    UNIT_NOT_FOUND = "unit_not_found"
    CARD_NOT_FOUND = "card_not_found"
    VERSION_CONFLICT = "version_conflict"
    BATTLE_NOT_ACTIVE = "battle_not_active"
    BATTLE_NOT_FOUND = "battle_not_found"
    INVALID_ACTION = "invalid_action"


ERROR_MESSAGES = {
    BattleError.NOT_YOUR_TURN: "It is not your turn.",
    BattleError.ATTACK_TOO_EARLY: "Cannot attack before round 2.",
    BattleError.INVALID_SLOT: "That battlefield position does not exist.",
    BattleError.SLOT_OCCUPIED: "That battlefield position is already taken.",
    BattleError.SLOT_EMPTY: "There is no unit in that position.",
    BattleError.ALREADY_ATTACKED: "That unit has already attacked this round.",
    BattleError.INSUFFICIENT_ENERGY: "Not enough energy.",
    BattleError.SPELL_ON_COOLDOWN: "That spell is still on cooldown.",
    BattleError.UNIT_NOT_FOUND: "Unit not found on your battlefield.",
    BattleError.CARD_NOT_FOUND: "Card not found.",
    BattleError.VERSION_CONFLICT: "The battle changed while your action was processed. Try again.",
    BattleError.BATTLE_NOT_ACTIVE: "The battle is not active.",
    BattleError.BATTLE_NOT_FOUND: "Battle not found.",
    BattleError.INVALID_ACTION: "Unknown action.",
}


def error_message(error: BattleError) -> str:
    return ERROR_MESSAGES.get(error, str(error.value))
