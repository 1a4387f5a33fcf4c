"""
Shared pytest fixtures for recombinex tests.
"""
from typing import List

import pytest

from recombinex import RecombinexError, Store, global_error_handler

from scoreboard import ScoreboardState, does_dispatch, does_not_dispatch, scoreboard_reducer


@pytest.fixture
def store():
    """Scoreboard store with the two permanent test effects."""
    store = Store(
        scoreboard_reducer,
        ScoreboardState(),
        effects=[does_dispatch, does_not_dispatch],
    )
    yield store
    store.teardown()


@pytest.fixture
def reported_errors():
    """Collect errors routed through the global error handler."""
    errors: List[RecombinexError] = []
    global_error_handler.register_handler(errors.append)
    yield errors
    global_error_handler.unregister_handler(errors.append)
