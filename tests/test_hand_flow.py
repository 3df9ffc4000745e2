"""Tests for moving a game state through a hand."""

import random

import pytest

from poker.betting_context import BettingContext
from poker.errors import ActionRejected, StructuralError
from poker.game_state import (
    ALL_IN, CALL, CHECK, FLOP, FOLD, GAME_OVER, PREFLOP, RAISE, RIVER, SETUP, LastAction, SidePot,
)
from poker.game_validator import count_all_cards, validate_game_state
from poker.hand_flow import (
    HUMAN_PLAYER_ID,
    calculate_side_pots,
    get_first_to_act_post_flop,
    get_next_active_player,
    initialize_game,
    is_betting_round_complete,
    next_hand,
    play_turn,
    set_blind_level,
    showdown,
    start_new_hand,
)
from poker.personality import PERSONALITY_PROFILES
from tests.conftest import cards, make_player, make_state


@pytest.fixture
def dealt():
    """Three handed, button on seat 0, blinds posted."""
    return start_new_hand(make_state(3, dealer_button=0), random.Random(1))


def total_chips(state):
    return sum(p.chips for p in state.players) + state.pot


class TestInitializeGame:

    def test_seats_players(self):
        state = initialize_game('Hero', [('Ada', 'SHARK'), {'name': 'Bo', 'personality': 'RANDOM'}],
                                random.Random(11))
        assert state.phase == SETUP
        assert len(state.players) == 3
        assert {p.id for p in state.players} == {HUMAN_PLAYER_ID, 'ai_1', 'ai_2'}
        seats = [p.seat for p in state.players]
        assert seats == sorted(seats) and len(set(seats)) == 3
        assert all(p.chips == 60000 for p in state.players)
        assert 0 <= state.dealer_button < 3

        bo = next(p for p in state.players if p.name == 'Bo')
        assert bo.personality in PERSONALITY_PROFILES

    def test_same_seed_same_table(self):
        first = initialize_game(None, [('A', 'RANDOM'), ('B', 'RANDOM'), ('C', 'ROCK')], random.Random(3))
        second = initialize_game(None, [('A', 'RANDOM'), ('B', 'RANDOM'), ('C', 'ROCK')], random.Random(3))
        assert first == second

    def test_settings_override(self):
        state = initialize_game(None, [('A', 'TAG'), ('B', 'LAG')], random.Random(1), {'initial_chips': 5000})
        assert all(p.chips == 5000 for p in state.players)

    @pytest.mark.parametrize('human, ai_players', [
        ('Hero', []),
        (None, [('Solo', 'TAG')]),
        (None, [(f"AI{i}", 'TAG') for i in range(10)]),
        ('   ', [('Ada', 'TAG')]),
        ('Hero', [('', 'TAG')]),
        ('Hero', [('Ada', 'WIZARD')]),
        ('Hero', [{'name': 'Ada', 'personality': None}]),
        ('Hero', [('Ada', 7)]),
    ])
    def test_rejects_bad_tables(self, human, ai_players):
        with pytest.raises(StructuralError):
            initialize_game(human, ai_players, random.Random(1))


class TestSetBlindLevel:

    def test_takes_blinds_from_schedule(self):
        state = set_blind_level(make_state(), 6)
        assert (state.tournament_level, state.small_blind, state.big_blind, state.ante) == (6, 200, 400, 0)

    def test_antes_when_enabled(self):
        state = set_blind_level(make_state(), 8, use_antes=True)
        assert state.ante == 75

    def test_unknown_level_keeps_state(self):
        state = make_state()
        assert set_blind_level(state, 99) is state


class TestSeatNavigation:

    def test_skips_folded_and_all_in(self):
        players = (make_player(0), make_player(1, is_active=False), make_player(2, is_all_in=True),
                   make_player(3))
        assert get_next_active_player(players, 0) == 3
        assert get_next_active_player(players, 3) == 0

    def test_nobody_else_can_act(self):
        players = (make_player(0), make_player(1, is_active=False))
        assert get_next_active_player(players, 0) == -1

    def test_first_to_act_post_flop(self):
        players = (make_player(0), make_player(1, is_active=False), make_player(2))
        assert get_first_to_act_post_flop(players, 0) == 2

    def test_round_complete(self):
        players = (make_player(0, current_bet=200, has_acted=True),
                   make_player(1, current_bet=200, has_acted=True),
                   make_player(2, is_active=False))
        assert is_betting_round_complete(players, 200)
        assert not is_betting_round_complete(players, 400)

    def test_round_incomplete_until_everyone_acts(self):
        players = (make_player(0, current_bet=200, has_acted=True), make_player(1, current_bet=200))
        assert not is_betting_round_complete(players, 200)


class TestStartNewHand:

    def test_blinds_and_cards(self, dealt):
        assert dealt.betting_round == PREFLOP
        assert [p.current_bet for p in dealt.players] == [0, 100, 200]
        assert [p.chips for p in dealt.players] == [10000, 9900, 9800]
        assert dealt.pot == 300
        assert dealt.current_bet == 200
        assert dealt.active_player == 0
        assert all(len(p.hole_cards) == 2 for p in dealt.players)
        assert len(dealt.burn_cards) == 1
        assert len(dealt.deck) == 45
        assert count_all_cards(dealt) == 52
        assert validate_game_state(dealt).is_valid

    def test_heads_up_button_posts_small_blind(self):
        state = start_new_hand(make_state(2, dealer_button=0), random.Random(1))
        assert [p.current_bet for p in state.players] == [100, 200]
        assert state.active_player == 0

    def test_antes_are_dead_money(self):
        state = start_new_hand(make_state(3, dealer_button=0, ante=50), random.Random(1))
        assert state.pot == 450
        assert [p.current_bet for p in state.players] == [0, 100, 200]
        assert [p.total_contribution for p in state.players] == [50, 150, 250]
        assert state.current_bet == 200

    def test_short_big_blind_sets_the_bet_to_match(self):
        players = (make_player(0), make_player(1), make_player(2, chips=150))
        state = start_new_hand(make_state(players=players, dealer_button=0), random.Random(1))
        assert [p.current_bet for p in state.players] == [0, 100, 150]
        assert state.players[2].is_all_in
        assert state.current_bet == 150
        assert state.active_player == 0
        assert BettingContext.from_game_state(state, 0).call_amount == 150

    def test_busted_players_sit_out(self):
        players = (make_player(0, chips=0), make_player(1), make_player(2))
        state = start_new_hand(make_state(players=players, dealer_button=0), random.Random(1))
        assert not state.players[0].is_active
        assert state.players[0].hole_cards == ()
        assert state.dealer_button == 1
        assert [p.current_bet for p in state.players] == [0, 100, 200]

    def test_game_over_with_one_stack(self):
        players = (make_player(0, chips=0), make_player(1, chips=30000), make_player(2, chips=0))
        state = start_new_hand(make_state(players=players), random.Random(1))
        assert state.phase == GAME_OVER
        assert state.hand_complete


class TestActions:

    def test_illegal_check_is_rejected(self, dealt):
        with pytest.raises(ActionRejected) as excinfo:
            play_turn(dealt, CHECK)
        assert excinfo.value.action == CHECK
        assert 'Cannot check when there is a bet to call' in excinfo.value.result.errors

    def test_short_raise_is_rejected(self, dealt):
        with pytest.raises(ActionRejected) as excinfo:
            play_turn(dealt, RAISE, 300)
        assert 'Raise amount 300 below minimum 400' in excinfo.value.result.errors

    def test_full_raise_reopens_action(self, dealt):
        state = play_turn(dealt, CALL)
        state = play_turn(state, RAISE, 600)

        assert state.current_bet == 600
        assert state.last_raise_size == 400
        assert state.pot == 1000
        assert state.players[1].has_acted
        assert not state.players[0].has_acted
        assert state.active_player == 2
        assert state.last_action == LastAction('p1', RAISE, 500)

    def test_incomplete_all_in_does_not_reopen(self):
        board = cards('2c', '7d', '9h')
        players = (
            make_player(0, chips=9600, current_bet=400, total_contribution=400, has_acted=True,
                        hole_cards=cards('As', 'Ah')),
            make_player(1, chips=9600, current_bet=400, total_contribution=400, has_acted=True,
                        hole_cards=cards('Ks', 'Kh')),
            make_player(2, chips=500, hole_cards=cards('Qs', 'Qh')),
        )
        state = make_state(players=players, current_bet=400, last_raise_size=400, pot=800,
                           active_player=2, betting_round=FLOP, community_cards=board)
        state = play_turn(state, ALL_IN)

        assert state.current_bet == 500
        assert state.last_raise_size == 400
        assert state.players[2].is_all_in
        assert state.players[0].has_acted and state.players[1].has_acted
        assert state.active_player == 0

    def test_folds_end_the_hand(self, dealt):
        state = play_turn(dealt, FOLD)
        state = play_turn(state, FOLD)

        assert state.hand_complete
        assert state.pot == 0
        assert state.players[2].chips == 10100
        assert state.active_player == 2
        result = state.last_hand_result
        assert result.end_type == 'fold'
        assert result.total_pot == 300
        assert result.awards[0].hand_description == 'Uncontested'
        assert dict(result.winnings) == {'p2': 300}

    def test_checked_down_hand_keeps_every_card(self, dealt):
        state = play_turn(dealt, CALL)
        state = play_turn(state, CALL)
        state = play_turn(state, CHECK)
        assert state.betting_round == FLOP
        assert len(state.community_cards) == 3
        assert state.active_player == 1
        assert state.current_bet == 0

        while not state.hand_complete:
            state = play_turn(state, CHECK)
            assert count_all_cards(state) == 52
            assert validate_game_state(state).is_valid

        assert state.betting_round == RIVER
        assert len(state.burn_cards) == 4
        assert state.last_hand_result.end_type == 'showdown'
        assert state.last_hand_result.total_pot == 600
        assert sum(p.chips for p in state.players) == 30000

    def test_all_in_and_call_runs_out_the_board(self):
        state = start_new_hand(make_state(2, dealer_button=0), random.Random(4))
        state = play_turn(state, ALL_IN)
        state = play_turn(state, CALL)

        assert state.hand_complete
        assert len(state.community_cards) == 5
        assert sum(p.chips for p in state.players) == 20000
        assert count_all_cards(state) == 52


class TestSidePots:

    def test_short_all_in_makes_a_side_pot(self):
        players = (
            make_player(0, total_contribution=100, is_all_in=True, chips=0),
            make_player(1, total_contribution=300),
            make_player(2, total_contribution=300),
            make_player(3, total_contribution=50, is_active=False),
        )
        assert calculate_side_pots(players) == (
            SidePot(350, ('p0', 'p1', 'p2')),
            SidePot(400, ('p1', 'p2')),
        )

    def test_folded_chips_above_live_players(self):
        players = (
            make_player(0, total_contribution=100),
            make_player(1, total_contribution=100),
            make_player(2, total_contribution=500, is_active=False),
        )
        assert calculate_side_pots(players) == (SidePot(700, ('p0', 'p1')),)

    def test_equal_contributions_make_one_pot(self):
        players = tuple(make_player(i, total_contribution=200) for i in range(3))
        assert calculate_side_pots(players) == (SidePot(600, ('p0', 'p1', 'p2')),)


class TestShowdown:

    def test_main_and_side_pot_go_to_different_winners(self):
        players = (
            make_player(0, chips=0, is_all_in=True, total_contribution=100, hole_cards=cards('As', 'Ah')),
            make_player(1, chips=9700, total_contribution=300, hole_cards=cards('Qd', 'Qh')),
            make_player(2, chips=9700, total_contribution=300, hole_cards=cards('3c', '4d')),
        )
        state = make_state(players=players, pot=700, betting_round=RIVER,
                           community_cards=cards('2c', '7d', '9h', 'Jc', 'Ks'))
        state = showdown(state)

        assert [p.chips for p in state.players] == [300, 10100, 9700]
        awards = state.last_hand_result.awards
        assert [(a.amount, a.winner_ids) for a in awards] == [(300, ('p0',)), (400, ('p1',))]
        assert awards[0].hand_description == 'Pair of Aces'
        assert state.side_pots == (SidePot(300, ('p0', 'p1', 'p2')), SidePot(400, ('p1', 'p2')))

    def test_odd_chip_goes_left_of_button(self):
        players = (
            make_player(0, chips=9850, total_contribution=150, hole_cards=cards('2c', '3d')),
            make_player(1, chips=9850, total_contribution=150, hole_cards=cards('2d', '3c')),
            make_player(2, chips=9999, total_contribution=1, is_active=False),
        )
        state = make_state(players=players, pot=301, dealer_button=0, betting_round=RIVER,
                           community_cards=cards('As', 'Ks', 'Qs', 'Js', 'Ts'))
        state = showdown(state)

        assert dict(state.last_hand_result.winnings) == {'p1': 151, 'p0': 150}
        assert state.last_hand_result.awards[0].winner_ids == ('p1', 'p0')
        assert state.players[1].chips == 10001
        assert state.players[0].chips == 10000


class TestNextHand:

    def test_button_moves_and_hand_number_increases(self, dealt):
        state = play_turn(play_turn(dealt, FOLD), FOLD)
        state = next_hand(state, random.Random(2))

        assert state.hand_number == 2
        assert state.dealer_button == 1
        assert not state.hand_complete
        assert state.last_hand_result is None
        assert [p.current_bet for p in state.players] == [200, 0, 100]
        assert total_chips(state) == 30000
