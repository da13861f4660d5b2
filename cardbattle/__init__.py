# cardbattle/__init__.py
from . import state
from .routes import battle_bp
from .service import BattleService
from .sockets import register_battle_socket_handlers


def init_battle(app, socketio, service=None):
    service = service or BattleService(state.store)
    app.extensions["cardbattle"] = service
    app.register_blueprint(battle_bp)
    register_battle_socket_handlers(socketio, service)
    return service
