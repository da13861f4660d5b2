# cardbattle/sockets.py
import logging
import time

from flask import request
from flask_socketio import emit, join_room, leave_room

from . import state
from .content.balance import SLOTS
from .content.cards import STARTER_DECK, STARTER_SPELLS
from .engine.catalog import CardCatalog
from .engine.errors import error_message
from .service import BattleService

logger = logging.getLogger(__name__)


def snapshot_for(battle, viewer_id, catalog: CardCatalog):
    """
    Returns a UI-friendly snapshot with friendly/enemy hp, energy and battlefield.
    Only the viewer's own hand is revealed.
    """
    enemy_id = next((pid for pid in battle.turn_order if pid != viewer_id), None)

    def unit_view(unit_id):
        if not unit_id:
            return None
        card_id = battle.units.get(unit_id)
        stats = catalog.get_card_stats(card_id or "")
        if stats is None:
            return {"unit_id": unit_id, "card_id": card_id}
        return {
            "unit_id": unit_id,
            "card_id": card_id,
            "name": stats.name,
            "class": stats.unit_class,
            "attack": stats.attack,
            "defense": stats.defense,
            "health": battle.card_healths.get(unit_id, stats.health),
            "health_max": stats.health,
        }

    def pack(player_id, reveal_hand):
        ps = battle.players.get(player_id) if player_id else None
        if not ps:
            return None
        data = {
            "id": ps.player_id,
            "name": ps.display_name,
            "hp": ps.hp,
            "energy": ps.energy,
            "battlefield": {slot: unit_view(ps.battlefield.get(slot)) for slot in SLOTS},
            "attacked": dict(ps.battlefield_attacks),
            "spell_cooldowns": dict(ps.spell_cooldowns),
            "hand_count": len(ps.hand),
            "spell_deck": list(ps.spell_deck),
        }
        if reveal_hand:
            data["hand"] = list(ps.hand)
        return data

    return {
        "battle_id": battle.battle_id,
        "status": battle.status,
        "phase": battle.phase,
        "round": battle.current_round,
        "your_turn": battle.current_turn == viewer_id,
        "you": pack(viewer_id, True),
        "enemy": pack(enemy_id, False),
        "log": battle.log[-30:],
        "winner": battle.winner,
        "version": battle.version,
        "log_length": len(battle.log),
    }


def emit_error(result):
    emit("battle_error", {
        "error": result.error.value if result.error else None,
        "message": result.message or (error_message(result.error) if result.error else ""),
    })


def entry_for(sid, payload):
    payload = payload if isinstance(payload, dict) else {}
    return {
        "player_id": sid,
        "display_name": payload.get("display_name") or sid[:5],
        "deck": list(payload.get("deck") or STARTER_DECK),
        "spell_deck": list(payload.get("spell_deck") or STARTER_SPELLS),
    }


def register_battle_socket_handlers(socketio, service: BattleService):
    pending_entries = {}

    def broadcast(battle):
        for player_id, ps in battle.players.items():
            if ps.is_ai:
                continue
            socketio.emit("battle_snapshot", snapshot_for(battle, player_id, service.catalog), to=player_id)
        if battle.status == "finished":
            socketio.emit("battle_system", "Battle ended.", to=battle.battle_id)

    service.add_hook(broadcast)

    @socketio.on("battle_queue")
    def battle_queue(payload=None):
        sid = request.sid
        if state.get_battle_id_by_player(sid):
            emit("battle_system", "Already in a battle.")
            return
        entry = entry_for(sid, payload)
        seed = int(time.time() * 1000) & 0xFFFFFFFF

        if isinstance(payload, dict) and payload.get("vs_ai"):
            battle_id = f"battle-{sid[:5]}-ai"
            join_room(battle_id, sid=sid)
            battle = service.create_vs_ai(battle_id, entry, seed)
            state.bind_players(battle)
            emit("battle_system", "Battle against the Arena Sentinel begins.")
            return

        pending_entries[sid] = entry
        state.enqueue(sid)
        emit("battle_system", "Queued for battle...")

        if len(state.battle_queue) >= 2:
            p1 = state.battle_queue.pop(0)
            p2 = state.battle_queue.pop(0)
            battle_id = state.battle_id_for(p1, p2)
            join_room(battle_id, sid=p1)
            join_room(battle_id, sid=p2)
            roster = [pending_entries.pop(p1), pending_entries.pop(p2)]
            battle = service.create(battle_id, roster, seed)
            state.bind_players(battle)
            logger.info("battle %s matched %s vs %s", battle_id, p1[:5], p2[:5])
            socketio.emit("battle_system", "Match found. Battle begins.", to=battle_id)

    @socketio.on("battle_action")
    def battle_action(payload):
        sid = request.sid
        battle_id = state.get_battle_id_by_player(sid)
        if not battle_id:
            emit("battle_system", "Not in a battle.")
            return
        payload = payload if isinstance(payload, dict) else {}
        action = {
            "type": payload.get("type"),
            "actor_id": sid,
            "payload": payload.get("payload") or {},
        }
        result = service.submit(battle_id, action)
        if not result.ok:
            emit_error(result)
            return
        emit("battle_system", result.message or "Action received.")

    @socketio.on("battle_preview")
    def battle_preview(payload):
        sid = request.sid
        battle_id = state.get_battle_id_by_player(sid)
        if not battle_id:
            emit("battle_system", "Not in a battle.")
            return
        result = service.preview(battle_id, sid, payload if isinstance(payload, dict) else {})
        if not result.ok:
            emit_error(result)
            return
        preview = result.preview
        emit("battle_preview", {
            "damage_min": preview.damage_min,
            "damage_max": preview.damage_max,
            "critical_chance": preview.critical_chance,
            "destroys": preview.destroys,
            "may_destroy": preview.may_destroy,
            "narrative": result.message,
        })

    @socketio.on("battle_resume")
    def battle_resume():
        battle_id = state.get_battle_id_by_player(request.sid)
        if battle_id:
            service.resume(battle_id)

    def leave_current(sid):
        battle_id = state.get_battle_id_by_player(sid)
        if not battle_id:
            return
        before = service.get_battle(battle_id)
        result = service.leave(battle_id, sid)
        leave_room(battle_id, sid=sid)
        state.player_to_battle.pop(sid, None)
        # leaving a finished battle commits nothing and is not a forfeit
        if result.ok and before is not None and result.battle.version != before.version:
            socketio.emit("battle_system", "Opponent left. Battle ended.", to=battle_id)
        battle = service.get_battle(battle_id)
        if battle and not any(
            state.get_battle_id_by_player(pid) == battle_id
            for pid, ps in battle.players.items()
            if not ps.is_ai
        ):
            state.cleanup_battle(battle_id, service.store)

    @socketio.on("battle_leave")
    def battle_leave():
        leave_current(request.sid)
        emit("battle_system", "You left the battle.")

    @socketio.on("disconnect")
    def battle_disconnect(reason=None):
        sid = request.sid
        state.dequeue(sid)
        pending_entries.pop(sid, None)
        leave_current(sid)
