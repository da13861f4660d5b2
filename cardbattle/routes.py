# cardbattle/routes.py
from flask import Blueprint, abort, current_app, jsonify, request

from .sockets import snapshot_for

battle_bp = Blueprint("battle", __name__)


def _service():
    return current_app.extensions["cardbattle"]


@battle_bp.route("/battle/cards")
def card_catalog():
    return jsonify(_service().catalog.all_cards())


@battle_bp.route("/battle/<battle_id>")
def battle_snapshot(battle_id):
    service = _service()
    battle = service.get_battle(battle_id)
    if battle is None:
        abort(404)
    viewer = request.args.get("player_id", "")
    return jsonify(snapshot_for(battle, viewer, service.catalog))


@battle_bp.route("/battle/<battle_id>/history")
def battle_history(battle_id):
    battle = _service().get_battle(battle_id)
    if battle is None:
        abort(404)
    return jsonify({"log": battle.log, "history": battle.history})
