# cardbattle/engine/turns.py
import copy
import logging
import random
import time
from typing import Any, Dict, List, Optional

from .catalog import CardCatalog
from .dice import shuffled
from .errors import BattleError
from .models import ActionResult, Battle, PlayerBattleState
from .passives import regen_amount
from .rules import clamp
from ..content.balance import CAPS, DEFAULTS, SLOTS

logger = logging.getLogger(__name__)


def opponent_of(battle: Battle, player_id: str) -> Optional[str]:
    for pid in battle.turn_order:
        if pid != player_id:
            return pid
    return None


def record(
    battle: Battle,
    player_id: str,
    action: str,
    message: str,
    card_id: Optional[str] = None,
    damage: Optional[int] = None,
) -> None:
    """Appends the narrative line and the structured history entry for one action."""
    battle.log.append(message)
    entry: Dict[str, Any] = {
        "round": battle.current_round,
        "player_id": player_id,
        "action": action,
        "timestamp": int(time.time() * 1000),
    }
    if card_id is not None:
        entry["card_id"] = card_id
    if damage is not None:
        entry["damage"] = damage
    battle.history.append(entry)


def new_player_state(entry: Dict[str, Any], r: random.Random) -> PlayerBattleState:
    """
    Builds a fresh PlayerBattleState from a roster entry:
    {"player_id", "display_name", "deck", "spell_deck", "is_ai"}.
    The hand is dealt from a seeded shuffle of the deck.
    """
    deck = shuffled(entry.get("deck") or [], r)
    hand_size = DEFAULTS["hand_size"]
    return PlayerBattleState(
        player_id=entry["player_id"],
        display_name=entry.get("display_name") or entry["player_id"][:5],
        hp=clamp(DEFAULTS["hp"], CAPS["hp_min"], CAPS["hp_max"]),
        energy=clamp(DEFAULTS["energy"], CAPS["energy_min"], CAPS["energy_max"]),
        deck=deck[hand_size:],
        hand=deck[:hand_size],
        spell_deck=list(entry.get("spell_deck") or [])[:DEFAULTS["spell_deck_size"]],
        is_ai=bool(entry.get("is_ai", False)),
    )


def _activate(battle: Battle) -> None:
    battle.status = "active"
    battle.phase = "battle"
    battle.current_turn = battle.turn_order[0]
    battle.log.append(f"Battle begins. {battle.players[battle.current_turn].display_name} goes first.")


def create_battle(battle_id: str, roster: List[Dict[str, Any]], seed: int = 0) -> Battle:
    battle = Battle(battle_id=battle_id, seed=seed)
    r = random.Random(f"{seed}:deal")
    for entry in roster[:2]:
        ps = new_player_state(entry, r)
        battle.players[ps.player_id] = ps
        battle.turn_order.append(ps.player_id)
    if len(battle.players) == 2:
        _activate(battle)
    return battle


def join_battle(battle: Battle, entry: Dict[str, Any]) -> ActionResult:
    """Second player joins a waiting battle: waiting -> active."""
    if battle.status != "waiting" or len(battle.players) >= 2 or entry["player_id"] in battle.players:
        return ActionResult.failed(battle, BattleError.BATTLE_NOT_ACTIVE)
    updated = copy.deepcopy(battle)
    r = random.Random(f"{battle.seed}:join")
    ps = new_player_state(entry, r)
    updated.players[ps.player_id] = ps
    updated.turn_order.append(ps.player_id)
    _activate(updated)
    return ActionResult.succeeded(updated, message=f"{ps.display_name} joined the battle.")


def check_actor(battle: Battle, actor_id: str) -> Optional[BattleError]:
    if battle.status != "active" or len(battle.players) != 2:
        return BattleError.BATTLE_NOT_ACTIVE
    if actor_id not in battle.players or battle.current_turn != actor_id:
        return BattleError.NOT_YOUR_TURN
    return None


def can_attack_this_round(battle: Battle) -> bool:
    return battle.current_round >= DEFAULTS["min_attack_round"]


def resume_battle_phase(battle: Battle) -> Battle:
    """Returns from the transient damage display phase."""
    if battle.phase == "damage" and battle.status == "active":
        battle.phase = "battle"
    return battle


def finish(battle: Battle, winner: Optional[str]) -> None:
    battle.status = "finished"
    battle.phase = "finished"
    battle.winner = winner
    if winner == "tie":
        battle.log.append("Both players fall. The battle is a tie.")
    elif winner:
        battle.log.append(f"{battle.players[winner].display_name} wins the battle.")
    else:
        battle.log.append("Battle closed with no winner.")


def check_battle_end(battle: Battle, acting_player: Optional[str] = None) -> bool:
    """
    Finishes the battle the moment any player's hp is at 0.
    Both players at 0 in the same mutation is a tie, except when an attack
    caused it: then the attacker wins and the state is logged as an anomaly.
    """
    if battle.status == "finished":
        return True
    defeated = [pid for pid in battle.turn_order if battle.players[pid].hp <= 0]
    if not defeated:
        return False
    if len(defeated) == len(battle.turn_order):
        if acting_player is not None:
            logger.warning(
                "battle %s: both players at 0 hp after an attack by %s; awarding attacker",
                battle.battle_id,
                acting_player,
            )
            finish(battle, acting_player)
        else:
            finish(battle, "tie")
        return True
    finish(battle, opponent_of(battle, defeated[0]))
    return True


def _regenerate_units(battle: Battle, ps: PlayerBattleState, catalog: CardCatalog) -> None:
    for slot in SLOTS:
        unit_id = ps.battlefield.get(slot)
        if not unit_id or unit_id not in battle.card_healths:
            continue
        stats = catalog.get_card_stats(battle.units.get(unit_id, ""))
        if stats is None:
            continue
        amount = regen_amount(stats)
        if amount <= 0:
            continue
        healed = min(stats.health, battle.card_healths[unit_id] + amount)
        gained = healed - battle.card_healths[unit_id]
        if healed >= stats.health:
            del battle.card_healths[unit_id]
        else:
            battle.card_healths[unit_id] = healed
        if gained > 0:
            battle.log.append(f"{stats.name} regenerates {gained} health.")


def apply_end_turn(battle: Battle, actor_id: str, catalog: Optional[CardCatalog] = None) -> ActionResult:
    error = check_actor(battle, actor_id)
    if error:
        return ActionResult.failed(battle, error)

    catalog = catalog or CardCatalog()
    updated = copy.deepcopy(battle)
    resume_battle_phase(updated)
    ps = updated.players[actor_id]

    _regenerate_units(updated, ps, catalog)
    ps.battlefield_attacks = {slot: False for slot in SLOTS}
    ps.cards_played_this_round = 0
    ps.spell_cooldowns = {
        spell_id: max(0, remaining - 1)
        for spell_id, remaining in ps.spell_cooldowns.items()
    }

    next_player = opponent_of(updated, actor_id)
    updated.current_turn = next_player
    if next_player == updated.turn_order[0]:
        updated.current_round += 1

    record(updated, actor_id, "end_turn", f"{ps.display_name} ended their turn.")
    return ActionResult.succeeded(updated, message="Turn ended.")


def apply_leave(battle: Battle, player_id: str) -> ActionResult:
    """Forfeit. Idempotent: leaving a finished battle changes nothing."""
    if battle.status == "finished":
        return ActionResult.succeeded(battle, message="Battle already finished.")
    if player_id not in battle.players:
        return ActionResult.failed(battle, BattleError.INVALID_ACTION, message="Not in this battle.")

    updated = copy.deepcopy(battle)
    name = updated.players[player_id].display_name
    record(updated, player_id, "leave", f"{name} left the battle.")
    if updated.status == "waiting":
        finish(updated, None)
    else:
        finish(updated, opponent_of(updated, player_id))
    return ActionResult.succeeded(updated, message="Left the battle.")
