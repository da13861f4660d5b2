# cardbattle/state.py
import copy
import logging
import threading
from typing import Dict, List, Optional

from .content.balance import DEFAULTS
from .engine.errors import BattleError
from .engine.models import Battle

logger = logging.getLogger(__name__)


class BattleStore:
    """
    In-memory battle storage with compare-and-swap commits.

    Committed snapshots are never mutated in place: reads hand out deep
    copies and every commit stores a fresh copy under the battle's lock.
    """

    def __init__(self, lock_timeout: Optional[float] = None):
        self.lock_timeout = DEFAULTS["lock_timeout"] if lock_timeout is None else lock_timeout
        self._battles: Dict[str, Battle] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, battle_id: str) -> Optional[threading.Lock]:
        """Lock for a stored battle; None for unknown ids so none is created."""
        with self._registry_lock:
            if battle_id not in self._battles:
                return None
            lock = self._locks.get(battle_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[battle_id] = lock
            return lock

    def add(self, battle: Battle) -> Battle:
        stored = copy.deepcopy(battle)
        with self._registry_lock:
            self._battles[battle.battle_id] = stored
        return copy.deepcopy(stored)

    def get_battle(self, battle_id: str) -> Optional[Battle]:
        battle = self._battles.get(battle_id)
        if battle is None:
            return None
        return copy.deepcopy(battle)

    def commit_battle(self, battle_id: str, expected_version: int, battle: Battle) -> Optional[BattleError]:
        """
        Stores battle as the next version if the committed version still
        equals expected_version. Returns None on success.
        """
        lock = self._lock_for(battle_id)
        if lock is None:
            return BattleError.BATTLE_NOT_FOUND
        if not lock.acquire(timeout=self.lock_timeout):
            logger.warning("battle %s: commit lock timed out", battle_id)
            return BattleError.VERSION_CONFLICT
        try:
            current = self._battles.get(battle_id)
            if current is None:
                return BattleError.BATTLE_NOT_FOUND
            if current.version != expected_version:
                logger.info(
                    "battle %s: version conflict (expected %s, committed %s)",
                    battle_id,
                    expected_version,
                    current.version,
                )
                return BattleError.VERSION_CONFLICT
            stored = copy.deepcopy(battle)
            stored.version = expected_version + 1
            self._battles[battle_id] = stored
            battle.version = stored.version
            return None
        finally:
            lock.release()

    def remove(self, battle_id: str) -> None:
        with self._registry_lock:
            self._battles.pop(battle_id, None)
            self._locks.pop(battle_id, None)

    def battle_ids(self) -> List[str]:
        return list(self._battles.keys())


store = BattleStore()
battle_queue: List[str] = []
player_to_battle: Dict[str, str] = {}


def enqueue(player_id: str) -> None:
    if player_id not in battle_queue:
        battle_queue.append(player_id)


def dequeue(player_id: str) -> None:
    if player_id in battle_queue:
        battle_queue.remove(player_id)


def battle_id_for(p1: str, p2: str) -> str:
    return f"battle-{p1[:5]}-{p2[:5]}"


def bind_players(battle: Battle) -> None:
    for player_id, ps in battle.players.items():
        if ps.is_ai:
            continue
        player_to_battle[player_id] = battle.battle_id


def get_battle_id_by_player(player_id: str) -> Optional[str]:
    return player_to_battle.get(player_id)


def cleanup_battle(battle_id: str, target: Optional[BattleStore] = None) -> None:
    target = target or store
    battle = target.get_battle(battle_id)
    target.remove(battle_id)
    if not battle:
        return
    for player_id in battle.players:
        if player_to_battle.get(player_id) == battle_id:
            player_to_battle.pop(player_id, None)
