import pytest

from regression_suite import FAILURE_STATES, SCENARIOS, run_all, select
from run_regression import main


@pytest.mark.parametrize("scenario", SCENARIOS, ids=lambda scenario: scenario.__name__)
def test_regression_scenario(scenario) -> None:
    assert scenario() is True


def test_select_filters_by_name_fragment() -> None:
    assert select() == SCENARIOS
    assert [s.__name__ for s in select(["cooldown"])] == ["scenario_spell_cooldowns_tick_down"]
    assert select(["no-such-scenario"]) == []


def test_failed_scenario_keeps_last_checked_state() -> None:
    def scenario_broken() -> bool:
        select(["cooldown"])[0]()
        raise AssertionError("forced failure")

    results = run_all([scenario_broken])

    assert results == [("scenario_broken", False, "forced failure")]
    state = FAILURE_STATES["scenario_broken"]
    assert state["players"]["p1"]["cooldowns"]["battle_cry"] == 3


def test_runner_exit_codes(capsys) -> None:
    assert main(["run_regression.py", "cooldown"]) == 0
    assert "1/1 scenarios passed" in capsys.readouterr().out
    assert main(["run_regression.py", "no-such-scenario"]) == 2
