"""
Builds the GameContext the AI decision engine consumes.

Two sources are supported: a live GameState (the normal path) and a free-text
prompt of the form used by chat-style opponents, e.g.

    Your hole cards: A♠, K♥
    Community cards: 10♦, J♣, 2♥
    Current bet to call: 400
    Pot size: 1,200
    Your chips: 9,800
    Position: Button
    Available actions: call, fold, raise, all-in

Fields missing from a prompt fall back to documented defaults.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from core.card import Card, RANKS, SUITS
from .betting_context import BettingContext, calculate_pot_odds, get_position_name
from .game_state import BETTING_ROUNDS, CALL, COMMUNITY_CARDS_BY_ROUND, FOLD, PREFLOP, GameState

logger = logging.getLogger(__name__)

DEFAULT_CALL_AMOUNT = 0
DEFAULT_POT_SIZE = 1000
DEFAULT_PLAYER_CHIPS = 5000
DEFAULT_TOTAL_PLAYERS = 6
DEFAULT_TOURNAMENT_LEVEL = 1
DEFAULT_POSITION = 'unknown'
DEFAULT_ACTIONS = (FOLD, CALL)

_ROUNDS_BY_CARD_COUNT = {count: name for name, count in COMMUNITY_CARDS_BY_ROUND.items()}


@dataclass(frozen=True)
class GameContext:
    """Everything the decision engine needs to know about one decision point."""
    available_actions: Tuple[str, ...]
    call_amount: int = DEFAULT_CALL_AMOUNT
    pot_size: int = DEFAULT_POT_SIZE
    player_chips: int = DEFAULT_PLAYER_CHIPS
    min_raise: Optional[int] = None     # minimum raise TO
    max_raise: Optional[int] = None     # maximum raise TO (all-in total)
    player_current_bet: int = 0
    total_players: int = DEFAULT_TOTAL_PLAYERS
    position: str = DEFAULT_POSITION
    betting_round: str = PREFLOP
    tournament_level: int = DEFAULT_TOURNAMENT_LEVEL
    hole_cards: Tuple[Card, ...] = field(default_factory=tuple)
    community_cards: Tuple[Card, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.min_raise is None:
            object.__setattr__(self, 'min_raise', max(self.call_amount + 100, 200))
        if self.max_raise is None:
            object.__setattr__(self, 'max_raise', self.player_current_bet + self.player_chips)

    @property
    def pot_odds(self) -> float:
        return calculate_pot_odds(self.call_amount, self.pot_size)

    @property
    def stack_size(self) -> int:
        return self.player_chips

    def to_dict(self) -> Dict[str, Any]:
        return {
            'available_actions': list(self.available_actions),
            'call_amount': self.call_amount,
            'pot_size': self.pot_size,
            'player_chips': self.player_chips,
            'min_raise': self.min_raise,
            'max_raise': self.max_raise,
            'pot_odds': self.pot_odds,
            'total_players': self.total_players,
            'position': self.position,
            'betting_round': self.betting_round,
            'tournament_level': self.tournament_level,
        }

    @classmethod
    def from_game_state(cls, game_state: GameState, player_idx: Optional[int] = None) -> 'GameContext':
        """Context for a seated player (the player to act by default)."""
        if player_idx is None:
            player_idx = game_state.active_player
        player = game_state.players[player_idx]
        betting = BettingContext.from_game_state(game_state, player_idx)
        return cls(
            available_actions=betting.available_actions,
            call_amount=betting.call_amount,
            pot_size=game_state.pot,
            player_chips=player.chips,
            min_raise=betting.min_raise_to,
            max_raise=betting.max_raise_to,
            player_current_bet=player.current_bet,
            total_players=len(game_state.players),
            position=get_position_name(player_idx, game_state.dealer_button, len(game_state.players)),
            betting_round=game_state.betting_round,
            tournament_level=game_state.tournament_level,
            hole_cards=player.hole_cards,
            community_cards=game_state.community_cards,
        )


_PATTERNS = {
    'available_actions': re.compile(r'Available actions: (.+)'),
    'call_amount': re.compile(r'Current bet to call: ([\d,]+)'),
    'pot_size': re.compile(r'Pot size: ([\d,]+)'),
    'player_chips': re.compile(r'Your chips: ([\d,]+)'),
    'min_raise': re.compile(r'minimum raise to ([\d,]+)'),
    'total_players': re.compile(r'(\d+) players'),
    'position': re.compile(r'Position: ([^\n,]+)'),
    'betting_round': re.compile(r'Round: (\w+)'),
    'tournament_level': re.compile(r'Level:? (\d+)'),
    'hole_cards': re.compile(r'Your hole cards: (.+)'),
    'community_cards': re.compile(r'Community cards: (.*)'),
}


def _parse_int(text: str) -> int:
    return int(text.replace(',', ''))


def parse_cards(cards_text: str) -> Tuple[Card, ...]:
    """Parse a comma separated list like 'A♠, 10♥'; unrecognised entries are skipped."""
    cards = []
    for chunk in cards_text.split(','):
        chunk = chunk.strip()
        if len(chunk) < 2:
            continue
        try:
            card = Card.parse(chunk)
        except (IndexError, ValueError):
            continue
        if card.rank in RANKS and card.suit in SUITS:
            cards.append(card)
    return tuple(cards)


def extract_game_context(prompt: str) -> GameContext:
    """Turn a free-text game description into a GameContext."""
    def find(name: str) -> Optional[str]:
        match = _PATTERNS[name].search(prompt)
        return match.group(1).strip() if match else None

    actions_text = find('available_actions')
    available_actions = (tuple(a.strip() for a in actions_text.split(',') if a.strip())
                         if actions_text else DEFAULT_ACTIONS)

    call_text = find('call_amount')
    call_amount = _parse_int(call_text) if call_text else DEFAULT_CALL_AMOUNT
    pot_text = find('pot_size')
    chips_text = find('player_chips')
    min_raise_text = find('min_raise')
    players_text = find('total_players')
    level_text = find('tournament_level')

    hole_text = find('hole_cards')
    community_text = find('community_cards')
    hole_cards = parse_cards(hole_text) if hole_text else ()
    community_cards = parse_cards(community_text) if community_text else ()

    round_text = find('betting_round')
    if round_text and round_text.lower() in BETTING_ROUNDS:
        betting_round = round_text.lower()
    else:
        betting_round = _ROUNDS_BY_CARD_COUNT.get(len(community_cards), PREFLOP)

    context = GameContext(
        available_actions=available_actions,
        call_amount=call_amount,
        pot_size=_parse_int(pot_text) if pot_text else DEFAULT_POT_SIZE,
        player_chips=_parse_int(chips_text) if chips_text else DEFAULT_PLAYER_CHIPS,
        min_raise=_parse_int(min_raise_text) if min_raise_text else None,
        total_players=int(players_text) if players_text else DEFAULT_TOTAL_PLAYERS,
        position=find('position') or DEFAULT_POSITION,
        betting_round=betting_round,
        tournament_level=int(level_text) if level_text else DEFAULT_TOURNAMENT_LEVEL,
        hole_cards=hole_cards,
        community_cards=community_cards,
    )
    logger.debug(f"Extracted context from prompt: {context.to_dict()}")
    return context
