# cardbattle/service.py
import copy
import logging
from typing import Any, Callable, Dict, List, Optional

from .content.balance import DEFAULTS
from .content.cards import AI_PROFILE
from .engine.ai import play_ai_turn
from .engine.catalog import CardCatalog
from .engine.errors import BattleError
from .engine.models import ActionResult, Battle
from .engine.mutator import apply_action, preview_attack
from .engine.turns import apply_leave, create_battle, join_battle, resume_battle_phase
from .state import BattleStore

logger = logging.getLogger(__name__)

PostCommitHook = Callable[[Battle], None]


class BattleService:
    """
    Read-modify-write loop around the pure battle engine.

    Every mutation re-reads the latest committed snapshot, applies one typed
    transition and commits it conditionally on the version it read.
    VersionConflict is retried a bounded number of times; all other errors
    are returned to the caller untouched. Hooks run after each commit.
    """

    def __init__(
        self,
        store: BattleStore,
        catalog: Optional[CardCatalog] = None,
        max_retries: Optional[int] = None,
        enable_ai: bool = True,
    ):
        self.store = store
        self.catalog = catalog or CardCatalog()
        self.max_retries = DEFAULTS["max_commit_retries"] if max_retries is None else max_retries
        self.enable_ai = enable_ai
        self.hooks: List[PostCommitHook] = []

    def add_hook(self, hook: PostCommitHook) -> None:
        self.hooks.append(hook)

    def get_battle(self, battle_id: str) -> Optional[Battle]:
        return self.store.get_battle(battle_id)

    def create(self, battle_id: str, roster: List[Dict[str, Any]], seed: int = 0) -> Battle:
        battle = self.store.add(create_battle(battle_id, roster, seed))
        logger.info("battle %s created (%s)", battle_id, battle.status)
        self._after_commit(battle)
        return battle

    def create_vs_ai(self, battle_id: str, entry: Dict[str, Any], seed: int = 0) -> Battle:
        return self.create(battle_id, [entry, dict(AI_PROFILE)], seed)

    def _transact(self, battle_id: str, transition: Callable[[Battle], ActionResult]) -> ActionResult:
        battle = None
        for attempt in range(self.max_retries + 1):
            battle = self.store.get_battle(battle_id)
            if battle is None:
                return ActionResult.failed(Battle(battle_id=battle_id), BattleError.BATTLE_NOT_FOUND)
            result = transition(battle)
            if not result.ok:
                return result
            if result.battle is battle:
                return result
            error = self.store.commit_battle(battle_id, battle.version, result.battle)
            if error is None:
                self._after_commit(result.battle)
                return result
            if error != BattleError.VERSION_CONFLICT:
                return ActionResult.failed(battle, error)
            logger.info("battle %s: retrying after conflict (attempt %s)", battle_id, attempt + 1)
        return ActionResult.failed(battle, BattleError.VERSION_CONFLICT)

    def submit(
        self,
        battle_id: str,
        action: Dict[str, Any],
        rng: Optional[Callable[[], float]] = None,
    ) -> ActionResult:
        return self._transact(battle_id, lambda battle: apply_action(battle, action, self.catalog, rng))

    def preview(self, battle_id: str, actor_id: str, payload: Dict[str, Any]) -> ActionResult:
        battle = self.store.get_battle(battle_id)
        if battle is None:
            return ActionResult.failed(Battle(battle_id=battle_id), BattleError.BATTLE_NOT_FOUND)
        unit_id = payload.get("unit_id")
        if not unit_id and battle.players.get(actor_id) and payload.get("slot"):
            unit_id = battle.players[actor_id].battlefield.get(payload["slot"])
        return preview_attack(battle, actor_id, unit_id or "", payload.get("target", "player"), self.catalog)

    def join(self, battle_id: str, entry: Dict[str, Any]) -> ActionResult:
        return self._transact(battle_id, lambda battle: join_battle(battle, entry))

    def leave(self, battle_id: str, player_id: str) -> ActionResult:
        return self._transact(battle_id, lambda battle: apply_leave(battle, player_id))

    def resume(self, battle_id: str) -> ActionResult:
        def transition(battle: Battle) -> ActionResult:
            if battle.phase != "damage":
                return ActionResult.succeeded(battle)
            return ActionResult.succeeded(resume_battle_phase(copy.deepcopy(battle)))
        return self._transact(battle_id, transition)

    def _after_commit(self, battle: Battle) -> None:
        for hook in self.hooks:
            hook(battle)
        if self.enable_ai:
            self._play_ai_if_due(battle)

    def _ai_is_due(self, battle: Battle) -> bool:
        if battle.status != "active" or not battle.current_turn:
            return False
        players = battle.players
        if all(ps.is_ai for ps in players.values()):
            return False
        return players[battle.current_turn].is_ai

    def _play_ai_if_due(self, battle: Battle) -> None:
        if not self._ai_is_due(battle):
            return

        def transition(current: Battle) -> ActionResult:
            if not self._ai_is_due(current):
                return ActionResult.succeeded(current)
            return play_ai_turn(current, current.current_turn, self.catalog)

        result = self._transact(battle.battle_id, transition)
        if not result.ok:
            logger.warning("battle %s: AI turn failed: %s", battle.battle_id, result.message)
