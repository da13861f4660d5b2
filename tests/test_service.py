import threading

import pytest

from cardbattle.content.cards import STARTER_DECK, STARTER_SPELLS
from cardbattle.engine.errors import BattleError
from cardbattle.engine.mutator import apply_attack
from cardbattle.engine.turns import apply_end_turn
from cardbattle.service import BattleService
from cardbattle.state import BattleStore


class InterleavingStore(BattleStore):
    """Lets another writer slip a commit in before the next commit attempt."""

    def __init__(self):
        super().__init__()
        self.interleave = 0

    def commit_battle(self, battle_id, expected_version, battle):
        if self.interleave:
            self.interleave -= 1
            current = self.get_battle(battle_id)
            super().commit_battle(battle_id, current.version, current)
        return super().commit_battle(battle_id, expected_version, battle)


@pytest.fixture
def store():
    return BattleStore()


@pytest.fixture
def service(store, catalog):
    return BattleService(store, catalog, enable_ai=False)


def test_second_commit_on_same_version_conflicts(store, make_battle, catalog) -> None:
    store.add(make_battle(p1_units={"left": "footman"}))
    first_read = store.get_battle("b1")
    second_read = store.get_battle("b1")

    ended = apply_end_turn(first_read, "p1", catalog)
    attacked = apply_attack(second_read, "p1", "footman#1", "player", catalog, rng=lambda: 0.99)
    assert ended.ok and attacked.ok

    assert store.commit_battle("b1", first_read.version, ended.battle) is None
    assert store.commit_battle("b1", second_read.version, attacked.battle) == BattleError.VERSION_CONFLICT

    committed = store.get_battle("b1")
    assert committed.version == 1
    assert committed.current_turn == "p2"
    assert committed.players["p2"].hp == 20


def test_commit_to_missing_battle(store, make_battle) -> None:
    for _ in range(3):
        assert store.commit_battle("nope", 0, make_battle()) == BattleError.BATTLE_NOT_FOUND
    assert "nope" not in store._locks


def test_removed_battle_drops_its_lock(store, make_battle) -> None:
    store.add(make_battle())
    assert store.commit_battle("b1", 0, make_battle()) is None
    store.remove("b1")

    assert store.commit_battle("b1", 1, make_battle()) == BattleError.BATTLE_NOT_FOUND
    assert store._locks == {}


def test_lock_timeout_is_a_version_conflict(make_battle) -> None:
    store = BattleStore(lock_timeout=0.01)
    store.add(make_battle())
    lock = store._lock_for("b1")
    lock.acquire()
    try:
        assert store.commit_battle("b1", 0, make_battle()) == BattleError.VERSION_CONFLICT
    finally:
        lock.release()


def test_reads_are_isolated_copies(store, make_battle) -> None:
    store.add(make_battle())
    read = store.get_battle("b1")
    read.players["p1"].hp = 1
    assert store.get_battle("b1").players["p1"].hp == 20


def test_submit_commits_and_runs_hooks(service, store, make_battle) -> None:
    store.add(make_battle())
    seen = []
    service.add_hook(lambda battle: seen.append((battle.version, battle.current_turn)))

    result = service.submit("b1", {"type": "end_turn", "actor_id": "p1"})

    assert result.ok
    assert result.battle.version == 1
    assert store.get_battle("b1").current_turn == "p2"
    assert seen == [(1, "p2")]


def test_rejected_action_is_not_committed(service, store, make_battle) -> None:
    store.add(make_battle())
    seen = []
    service.add_hook(seen.append)

    result = service.submit("b1", {"type": "end_turn", "actor_id": "p2"})

    assert result.error == BattleError.NOT_YOUR_TURN
    assert store.get_battle("b1").version == 0
    assert seen == []


def test_submit_to_unknown_battle(service) -> None:
    result = service.submit("missing", {"type": "end_turn", "actor_id": "p1"})
    assert result.error == BattleError.BATTLE_NOT_FOUND


def test_conflict_is_retried_against_fresh_state(make_battle, catalog) -> None:
    store = InterleavingStore()
    store.add(make_battle())
    service = BattleService(store, catalog, enable_ai=False)
    store.interleave = 1

    result = service.submit("b1", {"type": "end_turn", "actor_id": "p1"})

    assert result.ok
    assert store.get_battle("b1").version == 2
    assert store.get_battle("b1").current_turn == "p2"


def test_retries_are_bounded(make_battle, catalog) -> None:
    store = InterleavingStore()
    store.add(make_battle())
    service = BattleService(store, catalog, max_retries=2, enable_ai=False)
    store.interleave = 10

    result = service.submit("b1", {"type": "end_turn", "actor_id": "p1"})

    assert result.error == BattleError.VERSION_CONFLICT
    assert store.get_battle("b1").current_turn == "p1"


def test_concurrent_end_turns_apply_once(service, store, make_battle) -> None:
    store.add(make_battle())
    results = []
    start = threading.Barrier(2)

    def worker():
        start.wait()
        results.append(service.submit("b1", {"type": "end_turn", "actor_id": "p1"}))

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(r.ok for r in results) == [False, True]
    assert [r.error for r in results if not r.ok] == [BattleError.NOT_YOUR_TURN]
    committed = store.get_battle("b1")
    assert committed.version == 1
    assert committed.current_turn == "p2"


def test_preview_commits_nothing_and_bounds_the_attack(service, store, make_battle) -> None:
    store.add(make_battle(p1_units={"left": "duelist"}, p2_units={"center": "shieldbearer"}))

    preview = service.preview("b1", "p1", {"slot": "left", "target": "center"})
    assert preview.ok
    assert store.get_battle("b1").version == 0

    committed = service.submit("b1", {"type": "attack", "actor_id": "p1", "payload": {"slot": "left", "target": "center"}})

    assert committed.ok
    assert preview.preview.damage_min <= committed.outcome.damage <= preview.preview.damage_max
    assert store.get_battle("b1").version == 1


def test_leave_then_leave_again(service, store, make_battle) -> None:
    store.add(make_battle())

    first = service.leave("b1", "p2")
    second = service.leave("b1", "p2")

    assert first.battle.winner == "p1"
    assert second.ok
    assert store.get_battle("b1").version == 1


def test_resume_commits_only_from_damage_phase(service, store, make_battle) -> None:
    battle = make_battle()
    battle.phase = "damage"
    store.add(battle)

    assert service.resume("b1").battle.phase == "battle"
    assert store.get_battle("b1").version == 1
    assert service.resume("b1").ok
    assert store.get_battle("b1").version == 1


def test_ai_plays_its_turn_after_human_commit() -> None:
    store = BattleStore()
    service = BattleService(store)
    entry = {"player_id": "human", "display_name": "Human", "deck": list(STARTER_DECK), "spell_deck": list(STARTER_SPELLS)}

    created = service.create_vs_ai("b-ai", entry, seed=3)
    assert created.current_turn == "human"

    result = service.submit("b-ai", {"type": "end_turn", "actor_id": "human"})
    assert result.ok

    battle = store.get_battle("b-ai")
    ai = battle.players["ai-sentinel"]
    assert battle.version == 2
    assert battle.current_turn == "human"
    assert battle.current_round == 2
    assert len([slot for slot, unit in ai.battlefield.items() if unit]) == 1
    assert ai.energy == 80
