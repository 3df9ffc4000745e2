"""Smoke tests for the rich console tournament runner."""

import io
import random

import pytest
from rich.console import Console

from console_app.ui_console import TournamentRunner, render_card, render_cards
from core.card import Card
from poker import config
from poker.errors import InvariantViolation
from poker.game_state import GAME_OVER

OPPONENTS = [('Ada', 'SHARK'), ('Bo', 'MANIAC'), ('Cy', 'ROCK')]


def make_runner(seed: int = 5, **kwargs) -> TournamentRunner:
    console = Console(file=io.StringIO(), width=120)
    return TournamentRunner(console, random.Random(seed), opponents=OPPONENTS, **kwargs)


def test_render_cards():
    assert render_card(None).plain == '??'
    assert render_card(Card.parse('Ah')).plain == 'A♥'
    assert render_card(Card.parse('Ah'), hidden=True).plain == '??'
    assert render_cards([Card.parse('Ts'), Card.parse('2c')]).plain == '10♠ 2♣'


def test_computer_table_plays_hands():
    runner = make_runner(hands_per_level=2)
    final = runner.run(max_hands=8)

    assert final.hand_complete
    assert sum(p.chips for p in final.players) == len(OPPONENTS) * config.STARTING_CHIPS
    assert 1 <= runner.memory.total_hands <= 8
    assert runner.hand_log.get_stats()['total_logs'] > 0
    assert runner.hand_log.ai_entries
    if final.phase != GAME_OVER:
        assert final.tournament_level >= 4

    output = runner.console.file.getvalue()
    assert 'Final standings' in output


def test_same_seed_same_tournament():
    first = make_runner(seed=9).run(max_hands=4)
    second = make_runner(seed=9).run(max_hands=4)
    assert [p.chips for p in first.players] == [p.chips for p in second.players]


def test_invalid_state_is_logged_and_stops_the_game():
    runner = make_runner()
    broken = runner.game_state.update(pot=-10)

    with pytest.raises(InvariantViolation) as excinfo:
        runner.check_state(broken, 'bad_payout')

    assert str(excinfo.value).startswith('Invalid state after bad_payout: ')
    assert 'Invalid pot size: -10' in excinfo.value.result.errors
    entry = runner.hand_log.get_logs(level='error')[0]
    assert entry.data['context'] == 'bad_payout'
    assert entry.data['error_type'] == 'InvariantViolation'
