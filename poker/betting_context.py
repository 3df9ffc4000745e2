"""
Action legality for the current betting state.

This module is the single source of truth for which actions a player may
take and whether a proposed action is legal. All raise amounts use "raise TO"
semantics: an amount is the total bet the player reaches, not the increment.
"""

import logging
from dataclasses import dataclass
from numbers import Real
from typing import Any, Dict, Tuple, TYPE_CHECKING

from .errors import ValidationResult
from .game_state import ALL_IN, CALL, CHECK, FOLD, PLAYER_ACTIONS, RAISE, Player

if TYPE_CHECKING:
    from .game_state import GameState

logger = logging.getLogger(__name__)


def min_raise_total(current_bet: int, last_raise_size: int, big_blind: int) -> int:
    """Smallest legal raise TO: the table bet plus the larger of last raise and big blind."""
    return current_bet + max(last_raise_size, big_blind)


def get_available_actions(player: Player, current_bet: int, last_raise_size: int,
                          big_blind: int) -> Tuple[str, ...]:
    """
    Legal actions for a player, in the order check/call, fold, raise, all-in.

    A player who is out of the hand or already all-in has no actions. Raise is
    only offered when the player can cover a full minimum raise; a shorter
    stack may still move all-in.
    """
    if player is None or not player.is_active or player.is_all_in:
        return ()

    actions = []
    call_amount = current_bet - player.current_bet

    if call_amount == 0:
        actions.append(CHECK)
    elif 0 < call_amount <= player.chips:
        actions.append(CALL)

    if call_amount > 0:
        actions.append(FOLD)

    if player.chips >= min_raise_total(current_bet, last_raise_size, big_blind) - player.current_bet:
        actions.append(RAISE)

    if player.chips > 0:
        actions.append(ALL_IN)

    return tuple(actions)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _validate_raise(amount: Any, player: Player, game_state: 'GameState') -> ValidationResult:
    result = ValidationResult()
    if not _is_number(amount) or amount <= 0:
        result.error('Raise amount must be a positive number')
        return result

    minimum = min_raise_total(game_state.current_bet, game_state.last_raise_size, game_state.big_blind)
    maximum = player.current_bet + player.chips

    if amount < minimum:
        result.error(f"Raise amount {amount} below minimum {minimum}")
    if amount > maximum:
        result.error(f"Raise amount {amount} exceeds maximum {maximum}")

    additional = amount - player.current_bet
    if additional > player.chips:
        result.error(f"Insufficient chips for raise: need {additional}, have {player.chips}")
    return result


def _validate_call(player: Player, game_state: 'GameState') -> ValidationResult:
    result = ValidationResult()
    call_amount = game_state.current_bet - player.current_bet
    if call_amount <= 0:
        result.warn('No amount to call, should check instead')
    if call_amount > player.chips:
        result.error(f"Insufficient chips to call: need {call_amount}, have {player.chips}")
    return result


def _validate_all_in(player: Player, game_state: 'GameState') -> ValidationResult:
    result = ValidationResult()
    if player.chips <= 0:
        result.error('Player has no chips to go all-in')
    return result


def _validate_check(player: Player, game_state: 'GameState') -> ValidationResult:
    result = ValidationResult()
    if game_state.current_bet > player.current_bet:
        result.error('Cannot check when there is a bet to call')
    return result


_ACTION_VALIDATORS = {
    CALL: _validate_call,
    ALL_IN: _validate_all_in,
    CHECK: _validate_check,
}


def validate_player_action(action: str, amount: Any, player: Player,
                           game_state: 'GameState') -> ValidationResult:
    """
    Validate a proposed action for a player against the current betting state.

    Returns a ValidationResult; errors make the action illegal, warnings are
    advisory (for example calling when a check was possible).
    """
    result = ValidationResult()

    if action not in PLAYER_ACTIONS:
        result.error(f"Invalid action type: {action}")
        return result

    if not player.is_active:
        result.error('Player is not active')
    if player.is_all_in:
        result.error('Player is already all-in')

    available = get_available_actions(player, game_state.current_bet,
                                      game_state.last_raise_size, game_state.big_blind)
    if action not in available:
        result.error(f"Action {action} not available. Available: {', '.join(available)}")

    if action == RAISE:
        result.merge(_validate_raise(amount, player, game_state))
    elif action in _ACTION_VALIDATORS:
        result.merge(_ACTION_VALIDATORS[action](player, game_state))

    if not result.is_valid:
        logger.debug(f"Rejected {action} ({amount}) for {player.name}: {result.errors}")
    return result


def calculate_pot_odds(call_amount: int, pot_size: int) -> float:
    """Pot odds as (pot + call) / call; infinite when there is nothing to call."""
    if call_amount <= 0:
        return float('inf')
    return (pot_size + call_amount) / call_amount


def get_position_name(seat_index: int, dealer_button: int, total_players: int) -> str:
    """Name of a seat's position relative to the dealer button."""
    position = (seat_index - dealer_button + total_players) % total_players
    names = {0: 'Button', 1: 'Small Blind', 2: 'Big Blind', 3: 'Under the Gun'}
    if position in names:
        return names[position]
    if position == total_players - 1:
        return 'Cutoff'
    return f"Position {position}"


@dataclass(frozen=True)
class BettingContext:
    """
    Immutable betting constraints for one player's turn.

    All amounts are absolute chip values using "raise TO" semantics.
    """
    player_stack: int
    player_current_bet: int
    highest_bet: int
    pot_total: int
    min_raise_amount: int  # Minimum raise INCREMENT (max of last raise and big blind)
    available_actions: Tuple[str, ...]

    @property
    def call_amount(self) -> int:
        """Amount the player needs to add to match the table bet."""
        return max(0, self.highest_bet - self.player_current_bet)

    @property
    def min_raise_to(self) -> int:
        return self.highest_bet + self.min_raise_amount

    @property
    def max_raise_to(self) -> int:
        """The player's all-in total: current bet plus stack."""
        return self.player_current_bet + self.player_stack

    @property
    def pot_odds(self) -> float:
        return calculate_pot_odds(self.call_amount, self.pot_total)

    def to_dict(self) -> Dict:
        return {
            'player_stack': self.player_stack,
            'player_current_bet': self.player_current_bet,
            'highest_bet': self.highest_bet,
            'pot_total': self.pot_total,
            'min_raise_amount': self.min_raise_amount,
            'available_actions': list(self.available_actions),
            'call_amount': self.call_amount,
            'min_raise_to': self.min_raise_to,
            'max_raise_to': self.max_raise_to,
        }

    @staticmethod
    def from_game_state(game_state: 'GameState', player_idx: int = None) -> 'BettingContext':
        """Betting constraints for a player (the active player by default)."""
        if player_idx is None:
            player_idx = game_state.active_player
        player = game_state.players[player_idx]
        return BettingContext(
            player_stack=player.chips,
            player_current_bet=player.current_bet,
            highest_bet=game_state.current_bet,
            pot_total=game_state.pot,
            min_raise_amount=max(game_state.last_raise_size, game_state.big_blind),
            available_actions=get_available_actions(player, game_state.current_bet,
                                                    game_state.last_raise_size, game_state.big_blind),
        )
