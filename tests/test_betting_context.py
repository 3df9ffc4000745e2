"""
Unit tests for action legality and BettingContext calculations.
"""

import math
import unittest

from poker.betting_context import (
    BettingContext,
    calculate_pot_odds,
    get_available_actions,
    get_position_name,
    min_raise_total,
    validate_player_action,
)
from tests.conftest import make_player, make_state


class TestBettingContextComputedProperties(unittest.TestCase):
    """Test computed properties of BettingContext."""

    def _context(self, **overrides):
        fields = dict(
            player_stack=1000,
            player_current_bet=50,
            highest_bet=100,
            pot_total=200,
            min_raise_amount=50,
            available_actions=('call', 'fold', 'raise', 'all-in'),
        )
        fields.update(overrides)
        return BettingContext(**fields)

    def test_call_amount_when_behind(self):
        """Player needs to add chips to match highest bet."""
        self.assertEqual(self._context().call_amount, 50)

    def test_call_amount_when_matching(self):
        self.assertEqual(self._context(player_current_bet=100).call_amount, 0)

    def test_call_amount_never_negative(self):
        self.assertEqual(self._context(player_current_bet=150).call_amount, 0)

    def test_min_raise_to(self):
        """Minimum raise TO is highest_bet + min_raise_amount."""
        self.assertEqual(self._context().min_raise_to, 150)

    def test_max_raise_to(self):
        """Maximum raise TO is current_bet + stack (all-in)."""
        self.assertEqual(self._context().max_raise_to, 1050)

    def test_pot_odds(self):
        self.assertEqual(self._context().pot_odds, 5.0)


class TestFromGameState(unittest.TestCase):

    def test_creates_context_from_game_state(self):
        players = (
            make_player(0, current_bet=200, chips=9800),
            make_player(1, current_bet=0, chips=5000),
        )
        state = make_state(players=players, current_bet=200, pot=300, active_player=1)
        context = BettingContext.from_game_state(state)

        self.assertEqual(context.player_stack, 5000)
        self.assertEqual(context.highest_bet, 200)
        self.assertEqual(context.pot_total, 300)
        self.assertEqual(context.min_raise_amount, 200)
        self.assertEqual(context.call_amount, 200)
        self.assertEqual(context.min_raise_to, 400)
        self.assertEqual(context.available_actions, ('call', 'fold', 'raise', 'all-in'))

    def test_to_dict_includes_derived_fields(self):
        state = make_state(current_bet=200, pot=300)
        data = BettingContext.from_game_state(state, 0).to_dict()
        for key in ('player_stack', 'highest_bet', 'call_amount', 'min_raise_to', 'max_raise_to',
                    'available_actions'):
            self.assertIn(key, data)


class TestAvailableActions(unittest.TestCase):

    def test_nothing_to_call(self):
        actions = get_available_actions(make_player(1), 0, 0, 200)
        self.assertEqual(actions, ('check', 'raise', 'all-in'))

    def test_facing_a_bet(self):
        actions = get_available_actions(make_player(1), 400, 200, 200)
        self.assertEqual(actions, ('call', 'fold', 'raise', 'all-in'))

    def test_short_stack_can_only_fold_or_shove(self):
        player = make_player(1, chips=100)
        self.assertEqual(get_available_actions(player, 400, 200, 200), ('fold', 'all-in'))

    def test_can_call_but_not_raise(self):
        player = make_player(1, chips=500)
        self.assertEqual(get_available_actions(player, 400, 200, 200), ('call', 'fold', 'all-in'))

    def test_inactive_or_all_in_player_has_no_actions(self):
        self.assertEqual(get_available_actions(make_player(1, is_active=False), 400, 200, 200), ())
        self.assertEqual(get_available_actions(make_player(1, is_all_in=True, chips=0), 400, 200, 200), ())

    def test_min_raise_uses_big_blind_floor(self):
        self.assertEqual(min_raise_total(200, 50, 200), 400)
        self.assertEqual(min_raise_total(1000, 600, 200), 1600)


class TestValidatePlayerAction(unittest.TestCase):

    def setUp(self):
        players = (
            make_player(0, current_bet=200, chips=9800),
            make_player(1, current_bet=0, chips=5000),
        )
        self.state = make_state(players=players, current_bet=200, last_raise_size=200, pot=300,
                                active_player=1)
        self.player = self.state.players[1]

    def test_raise_below_minimum(self):
        result = validate_player_action('raise', 300, self.player, self.state)
        self.assertFalse(result.is_valid)
        self.assertIn('Raise amount 300 below minimum 400', result.errors)

    def test_raise_above_maximum(self):
        result = validate_player_action('raise', 6000, self.player, self.state)
        self.assertFalse(result.is_valid)
        self.assertIn('Raise amount 6000 exceeds maximum 5000', result.errors)

    def test_raise_must_be_positive_number(self):
        for amount in (0, -100, None, 'lots'):
            result = validate_player_action('raise', amount, self.player, self.state)
            self.assertIn('Raise amount must be a positive number', result.errors)

    def test_valid_raise(self):
        result = validate_player_action('raise', 400, self.player, self.state)
        self.assertTrue(result.is_valid)
        self.assertEqual(result.warnings, [])

    def test_check_facing_bet(self):
        result = validate_player_action('check', 0, self.player, self.state)
        self.assertIn('Cannot check when there is a bet to call', result.errors)

    def test_valid_call_and_fold(self):
        self.assertTrue(validate_player_action('call', 200, self.player, self.state).is_valid)
        self.assertTrue(validate_player_action('fold', 0, self.player, self.state).is_valid)

    def test_unknown_action(self):
        result = validate_player_action('bet', 500, self.player, self.state)
        self.assertEqual(result.errors, ['Invalid action type: bet'])

    def test_inactive_player(self):
        player = self.player.update(is_active=False)
        result = validate_player_action('fold', 0, player, self.state)
        self.assertIn('Player is not active', result.errors)

    def test_call_with_nothing_to_call(self):
        player = self.player.update(current_bet=200)
        result = validate_player_action('call', 0, player, self.state)
        self.assertFalse(result.is_valid)
        self.assertIn('No amount to call, should check instead', result.warnings)

    def test_short_stack_call_rejected(self):
        player = self.player.update(chips=100)
        result = validate_player_action('call', 100, player, self.state)
        self.assertIn('Insufficient chips to call: need 200, have 100', result.errors)
        self.assertTrue(validate_player_action('all-in', 100, player, self.state).is_valid)

    def test_validation_does_not_change_state(self):
        before = self.state.to_dict()
        validate_player_action('raise', 300, self.player, self.state)
        self.assertEqual(self.state.to_dict(), before)


class TestPotOddsAndPosition(unittest.TestCase):

    def test_pot_odds(self):
        self.assertEqual(calculate_pot_odds(100, 300), 4.0)
        self.assertTrue(math.isinf(calculate_pot_odds(0, 300)))

    def test_position_names(self):
        self.assertEqual(get_position_name(3, 3, 6), 'Button')
        self.assertEqual(get_position_name(4, 3, 6), 'Small Blind')
        self.assertEqual(get_position_name(5, 3, 6), 'Big Blind')
        self.assertEqual(get_position_name(0, 3, 6), 'Under the Gun')
        self.assertEqual(get_position_name(2, 3, 6), 'Cutoff')
        self.assertEqual(get_position_name(1, 3, 6), 'Position 4')


if __name__ == '__main__':
    unittest.main()
