"""Reducer composition helpers."""
from collections import namedtuple
from dataclasses import dataclass

import pytest
from immutables import Map

from recombinex import ReducerError, combine_reducers, create_reducer, for_key, on

from scoreboard import (
    HomeState,
    ScoreboardState,
    action1,
    action2,
    away_score,
    home_reducer,
    home_score,
    reset_score,
    scoreboard_reducer,
)


def increment(state, action):
    return state + 1 if action.type == home_score.type else state


@pytest.mark.unit
def test_reducer_is_deterministic():
    state = ScoreboardState()
    for action in (home_score(), away_score(), reset_score(), action1(), action2()):
        assert scoreboard_reducer(state, action) == scoreboard_reducer(state, action)


@pytest.mark.unit
def test_combine_reducers_folds_in_supplied_order():
    """r2 observes r1's output within the same action"""
    def increment_x(state, action):
        return {**state, "x": state["x"] + 1}

    def copy_x_into_y(state, action):
        return {**state, "y": state["x"]}

    reducer = combine_reducers(increment_x, copy_x_into_y)
    assert reducer({"x": 0, "y": 0}, action1()) == {"x": 1, "y": 1}

    reversed_reducer = combine_reducers(copy_x_into_y, increment_x)
    assert reversed_reducer({"x": 0, "y": 0}, action1()) == {"x": 1, "y": 0}


@pytest.mark.unit
def test_combine_reducers_without_reducers_is_identity():
    state = {"x": 0}
    assert combine_reducers()(state, action1()) is state


@pytest.mark.unit
def test_for_key_changes_only_its_slot():
    reducer = for_key("home", increment)

    new_state = reducer({"home": 0, "away": 0}, home_score())

    assert new_state == {"home": 1, "away": 0}


@pytest.mark.unit
def test_for_key_does_not_mutate_original_state():
    state = {"home": 0, "away": 0}

    for_key("home", increment)(state, home_score())

    assert state == {"home": 0, "away": 0}


@pytest.mark.unit
def test_for_key_returns_same_object_when_slot_unchanged():
    state = ScoreboardState()

    assert for_key("home", home_reducer)(state, away_score()) is state


@pytest.mark.unit
def test_for_key_on_pydantic_model_shares_untouched_slots():
    state = ScoreboardState()

    new_state = for_key("home", home_reducer)(state, home_score())

    assert new_state.home == HomeState(score=1)
    assert new_state.away is state.away


@pytest.mark.unit
def test_for_key_with_nested_dotted_path():
    reducer = for_key("home.score", increment)

    new_state = reducer(ScoreboardState(), home_score())

    assert new_state.home.score == 1
    assert new_state.away.score == 0


@pytest.mark.unit
def test_for_key_with_tuple_path_into_sequence():
    reducer = for_key(("scores", 1), increment)

    assert reducer({"scores": (0, 0, 0)}, home_score()) == {"scores": (0, 1, 0)}


@pytest.mark.unit
def test_for_key_on_immutable_map():
    reducer = for_key("home", increment)

    new_state = reducer(Map(home=0, away=0), home_score())

    assert isinstance(new_state, Map)
    assert new_state == Map(home=1, away=0)


@pytest.mark.unit
def test_for_key_on_dataclass_and_namedtuple():
    @dataclass(frozen=True)
    class Scores:
        home: int = 0
        away: int = 0

    ScoresTuple = namedtuple("ScoresTuple", ["home", "away"])
    reducer = for_key("home", increment)

    assert reducer(Scores(), home_score()) == Scores(home=1, away=0)
    assert reducer(ScoresTuple(0, 0), home_score()) == ScoresTuple(1, 0)


@pytest.mark.unit
def test_for_key_missing_path_raises_reducer_error():
    reducer = for_key("missing", increment)

    with pytest.raises(ReducerError):
        reducer({"home": 0}, home_score())


@pytest.mark.unit
def test_for_key_rejects_empty_path():
    with pytest.raises(ReducerError):
        for_key("", increment)


@pytest.mark.unit
def test_create_reducer_dispatches_on_action_type():
    reducer = create_reducer(
        0,
        on(home_score, lambda state, action: state + 1),
        ("[Counter] Add", lambda state, action: state + action.payload),
    )

    assert reducer(None, home_score()) == 1
    assert reducer(5, home_score()) == 6
    assert reducer(5, away_score()) == 5
    assert reducer.initial_state == 0
    assert set(reducer.handlers) == {home_score.type, "[Counter] Add"}


@pytest.mark.unit
def test_create_reducer_rejects_invalid_handler():
    with pytest.raises(ReducerError):
        create_reducer(0, "not a handler")


@pytest.mark.unit
def test_scoreboard_reducer_composes_all_slots():
    state = scoreboard_reducer(ScoreboardState(), home_score())
    state = scoreboard_reducer(state, action2())

    assert state.home.score == 1
    assert state.last_action_is_action2 is True

    state = scoreboard_reducer(state, reset_score())
    assert state.home.score == 0
    assert state.last_action_is_action2 is False
