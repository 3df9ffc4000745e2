"""
Shared pytest fixtures for the tournament core test suite.

These fixtures are available to all tests under tests/.
unittest.TestCase classes are NOT affected -- they build their own state in
setUp.  They can still import the plain helper functions directly:

    from tests.conftest import make_player, make_state
"""
import random

import pytest

from core.card import Card
from poker.game_state import GameState, Player


def make_player(idx: int = 0, **overrides) -> Player:
    """A funded, active player seated at idx."""
    fields = dict(
        id=f"p{idx}",
        name=f"Player{idx}",
        seat=idx,
        chips=10000,
        is_human=idx == 0,
    )
    fields.update(overrides)
    return Player(**fields)


def make_state(num_players: int = 3, **overrides) -> GameState:
    """A preflop state with no cards dealt and nothing bet."""
    players = overrides.pop('players', None)
    if players is None:
        players = tuple(make_player(i) for i in range(num_players))
    fields = dict(players=tuple(players), small_blind=100, big_blind=200, last_raise_size=200)
    fields.update(overrides)
    return GameState(**fields)


def cards(*shorthand: str):
    """Cards from shorthand such as cards('As', 'Kh')."""
    return tuple(Card.parse(text) for text in shorthand)


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def player():
    return make_player(1, is_human=False)


@pytest.fixture
def game_state():
    return make_state()
