"""
Whole-state invariant checks for a game in progress.

Every function here is pure: it reads a GameState (or one of its parts) and
returns a ValidationResult. Errors block the transition that produced the
state; warnings are advisory. Nothing is raised for malformed-but-typed
input, the problem is reported instead.
"""

import logging
from collections import Counter
from numbers import Real
from typing import Any, List, Mapping, Sequence, Union

from core.card import Card, is_valid_card
from .betting_context import get_available_actions, validate_player_action
from .config import HIGH_ACTION_COUNT_WARNING
from .errors import StructuralError, ValidationResult
from .game_state import (
    BETTING_ROUNDS, COMMUNITY_CARDS_BY_ROUND, GAME_PHASES, MAX_PLAYERS, MAX_SEAT,
    GameState, Player,
)

logger = logging.getLogger(__name__)

MAX_COMMUNITY_CARDS = 5
MAX_BURN_CARDS = 4
DECK_SIZE = 52

__all__ = [
    'validate_game_state',
    'validate_players',
    'validate_cards',
    'validate_betting',
    'validate_game_flow',
    'validate_player_action',
    'quick_validate',
    'count_all_cards',
    'get_all_cards',
    'get_available_actions',
]


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (tuple, list))


def validate_players(players: Sequence[Player]) -> ValidationResult:
    result = ValidationResult()

    if not _is_sequence(players):
        result.error('Players must be a list')
        return result
    if not players:
        result.error('Game must have at least one player')
        return result
    if len(players) > MAX_PLAYERS:
        result.error(f"Game cannot have more than {MAX_PLAYERS} players")

    seen_ids = set()
    seen_seats = set()
    human_count = 0
    active_count = 0

    for index, player in enumerate(players):
        if not isinstance(player, Player):
            result.error(f"Player at index {index} is not a valid object")
            continue

        label = player.name if player.name is not None else index
        for field_name in Player.REQUIRED_FIELDS:
            if getattr(player, field_name) is None:
                result.error(f"Player {label} missing required field: {field_name}")

        if player.id is not None:
            if player.id in seen_ids:
                result.error(f"Duplicate player ID: {player.id}")
            seen_ids.add(player.id)

        if player.seat is not None:
            if player.seat in seen_seats:
                result.error(f"Duplicate seat number: {player.seat}")
            seen_seats.add(player.seat)
            if not _is_index(player.seat) or not 0 <= player.seat <= MAX_SEAT:
                result.error(f"Invalid seat number for {label}: {player.seat}")

        chips_ok = _is_number(player.chips) and player.chips >= 0
        if not chips_ok:
            result.error(f"Invalid chip count for {label}: {player.chips}")

        if not _is_sequence(player.hole_cards):
            result.error(f"Invalid hole cards for {label}")
        elif player.hole_cards:
            if len(player.hole_cards) != 2:
                result.error(f"{label} must have exactly 2 hole cards, has {len(player.hole_cards)}")
            for card_index, card in enumerate(player.hole_cards):
                if not is_valid_card(card):
                    result.error(f"Invalid hole card {card_index} for {label}")

        if player.is_human:
            human_count += 1
        if player.is_active:
            active_count += 1

        if not _is_number(player.current_bet) or player.current_bet < 0:
            result.error(f"Invalid current bet for {label}: {player.current_bet}")

        if chips_ok:
            if player.is_all_in and player.chips > 0:
                result.warn(f"{label} is marked all-in but still has chips")
            if not player.is_all_in and player.chips == 0 and player.is_active:
                result.warn(f"{label} has no chips but is not marked all-in")

    if human_count == 0:
        result.warn('No human players in game')
    elif human_count > 1:
        result.warn('Multiple human players detected')

    if active_count < 2:
        result.warn('Fewer than 2 active players')

    return result


def get_all_cards(game_state: GameState) -> List[Card]:
    """Every card in play: deck, community, burn and all hole cards."""
    cards = list(game_state.deck) + list(game_state.community_cards) + list(game_state.burn_cards)
    for player in game_state.players:
        if player.hole_cards:
            cards.extend(player.hole_cards)
    return cards


def count_all_cards(game_state: GameState) -> int:
    return len(get_all_cards(game_state))


def validate_cards(game_state: GameState) -> ValidationResult:
    result = ValidationResult()
    community = game_state.community_cards

    if not _is_sequence(community):
        result.error('Community cards must be a list')
    else:
        if len(community) > MAX_COMMUNITY_CARDS:
            result.error(f"Too many community cards: {len(community)}")
        for index, card in enumerate(community):
            if not is_valid_card(card):
                result.error(f"Invalid community card at index {index}")

        expected = COMMUNITY_CARDS_BY_ROUND.get(game_state.betting_round)
        if expected is not None and len(community) != expected:
            result.error(f"Expected {expected} community cards for {game_state.betting_round}, "
                         f"found {len(community)}")

    if not _is_sequence(game_state.burn_cards):
        result.error('Burn cards must be a list')
    else:
        if len(game_state.burn_cards) > MAX_BURN_CARDS:
            result.error(f"Too many burn cards: {len(game_state.burn_cards)}")
        for index, card in enumerate(game_state.burn_cards):
            if not is_valid_card(card):
                result.error(f"Invalid burn card at index {index}")

    if not _is_sequence(game_state.deck):
        result.error('Deck must be a list')
    else:
        for index, card in enumerate(game_state.deck):
            if not is_valid_card(card):
                result.error(f"Invalid deck card at index {index}")

    try:
        all_cards = get_all_cards(game_state)
        total = len(all_cards)
        if total > DECK_SIZE:
            result.error(f"Total cards exceed {DECK_SIZE}: {total}")
        elif total < DECK_SIZE:
            result.warn(f"Missing cards, total: {total}")

        duplicates = [key for key, count in Counter(f"{c.rank}{c.suit}" for c in all_cards).items()
                      if count > 1]
        if duplicates:
            result.error('Duplicate cards detected in game')
            logger.debug(f"Duplicate card keys: {duplicates}")
    except (TypeError, AttributeError) as e:
        result.warn(f"Card count validation failed: {e}")

    return result


def validate_betting(game_state: GameState) -> ValidationResult:
    result = ValidationResult()

    if not _is_number(game_state.pot) or game_state.pot < 0:
        result.error(f"Invalid pot size: {game_state.pot}")
    if not _is_number(game_state.current_bet) or game_state.current_bet < 0:
        result.error(f"Invalid current bet: {game_state.current_bet}")

    small_blind_ok = _is_number(game_state.small_blind) and game_state.small_blind > 0
    big_blind_ok = _is_number(game_state.big_blind) and game_state.big_blind > 0
    if not small_blind_ok:
        result.error(f"Invalid small blind: {game_state.small_blind}")
    if not big_blind_ok:
        result.error(f"Invalid big blind: {game_state.big_blind}")
    if small_blind_ok and big_blind_ok and game_state.big_blind <= game_state.small_blind:
        result.error('Big blind must be larger than small blind')

    if _is_number(game_state.current_bet):
        for player in game_state.players:
            if not isinstance(player, Player) or not player.is_active:
                continue
            if player.is_all_in or not player.has_acted:
                continue
            if not (_is_number(player.current_bet) and _is_number(player.chips)):
                continue
            if player.current_bet < game_state.current_bet and player.chips > 0:
                result.warn(f"{player.name} current bet {player.current_bet} is less than "
                            f"current bet {game_state.current_bet}")

    if game_state.betting_round not in BETTING_ROUNDS:
        result.error(f"Invalid betting round: {game_state.betting_round}")

    return result


def validate_game_flow(game_state: GameState) -> ValidationResult:
    result = ValidationResult()
    players = game_state.players

    if not _is_index(game_state.active_player):
        result.error(f"Invalid active player index: {game_state.active_player}")
    elif not 0 <= game_state.active_player < len(players):
        result.error(f"Active player index out of range: {game_state.active_player}")
    else:
        active = players[game_state.active_player]
        if not active.is_active:
            result.error('Active player is not marked as active')
        if active.is_all_in:
            result.warn('Active player is all-in')

    if not _is_index(game_state.dealer_button):
        result.error(f"Invalid dealer button: {game_state.dealer_button}")
    elif not 0 <= game_state.dealer_button < len(players):
        result.error(f"Dealer button out of range: {game_state.dealer_button}")

    if not _is_index(game_state.hand_number) or game_state.hand_number < 1:
        result.error(f"Invalid hand number: {game_state.hand_number}")

    if not _is_index(game_state.action_count) or game_state.action_count < 0:
        result.error(f"Invalid action count: {game_state.action_count}")
    elif game_state.action_count > HIGH_ACTION_COUNT_WARNING:
        result.warn(f"High action count detected: {game_state.action_count}")

    return result


def validate_game_state(game_state: Union[GameState, Mapping]) -> ValidationResult:
    """
    Run every invariant check over a game state.

    Accepts a GameState or its dict form. Missing structure that makes the
    checks impossible is reported as a single "Validation error" rather than
    raised.
    """
    try:
        if isinstance(game_state, Mapping):
            game_state = GameState.from_dict(game_state)
        if not isinstance(game_state, GameState):
            return ValidationResult(errors=['Game state is not a valid object'])

        phase_result = ValidationResult()
        if game_state.phase not in GAME_PHASES:
            phase_result.error(f"Invalid game phase: {game_state.phase}")

        player_result = validate_players(game_state.players)
        if not (_is_sequence(game_state.players) and all(isinstance(p, Player) for p in game_state.players)):
            raise StructuralError('players must be a list of Player records')
        result = ValidationResult.combine([
            phase_result,
            player_result,
            validate_cards(game_state),
            validate_betting(game_state),
            validate_game_flow(game_state),
        ])
    except (StructuralError, TypeError, AttributeError, KeyError) as e:
        logger.warning(f"Game state validation aborted: {e}")
        return ValidationResult(errors=[f"Validation error: {e}"])

    if not result.is_valid:
        logger.warning(f"Game state failed validation: {result.errors}")
    return result


def quick_validate(game_state: Any) -> bool:
    """Cheap gate for hot paths: players present, pot and current bet sane."""
    if isinstance(game_state, Mapping):
        try:
            game_state = GameState.from_dict(game_state)
        except (StructuralError, TypeError, AttributeError, KeyError):
            return False
    if not isinstance(game_state, GameState):
        return False
    return (
        _is_sequence(game_state.players)
        and len(game_state.players) > 0
        and _is_number(game_state.pot)
        and game_state.pot >= 0
        and _is_number(game_state.current_bet)
        and game_state.current_bet >= 0
    )
