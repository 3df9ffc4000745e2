from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from core.card import Card
from .errors import StructuralError

# GAME PHASES
SETUP = 'setup'
PLAYING = 'playing'
GAME_OVER = 'game-over'
GAME_PHASES = (SETUP, PLAYING, GAME_OVER)

# BETTING ROUNDS
PREFLOP = 'preflop'
FLOP = 'flop'
TURN = 'turn'
RIVER = 'river'
BETTING_ROUNDS = (PREFLOP, FLOP, TURN, RIVER)
COMMUNITY_CARDS_BY_ROUND = {PREFLOP: 0, FLOP: 3, TURN: 4, RIVER: 5}

# PLAYER ACTIONS
FOLD = 'fold'
CHECK = 'check'
CALL = 'call'
RAISE = 'raise'
ALL_IN = 'all-in'
PLAYER_ACTIONS = (FOLD, CHECK, CALL, RAISE, ALL_IN)

MAX_PLAYERS = 9
MAX_SEAT = MAX_PLAYERS - 1

DEFAULT_SETTINGS = {
    'initial_chips': 60000,
    'small_blind': 100,
    'big_blind': 200,
    'ante': 200,
    'max_players': MAX_PLAYERS,
    'max_actions_per_round': 50,
}


def _cards_from(data: Optional[List]) -> Tuple[Card, ...]:
    if data is None:
        return ()
    return tuple(card if isinstance(card, Card) else Card.from_dict(card) for card in data)


@dataclass(frozen=True)
class Player:
    id: Any
    name: str
    seat: int
    chips: int
    is_human: bool
    is_active: bool = True
    hole_cards: Tuple[Card, ...] = field(default_factory=tuple)
    current_bet: int = 0
    total_contribution: int = 0
    ### FLAGS ###
    has_acted: bool = False
    is_all_in: bool = False
    personality: Optional[str] = None

    REQUIRED_FIELDS = ('id', 'name', 'seat', 'chips', 'is_human', 'is_active')

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'seat': self.seat,
            'chips': self.chips,
            'is_human': self.is_human,
            'is_active': self.is_active,
            'hole_cards': Card.list_to_dict(self.hole_cards),
            'current_bet': self.current_bet,
            'total_contribution': self.total_contribution,
            'has_acted': self.has_acted,
            'is_all_in': self.is_all_in,
            'personality': self.personality,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> 'Player':
        """
        Build a player from a dict. Missing required fields come through as
        None so the validator can report them rather than failing here.
        """
        return cls(
            id=data.get('id'),
            name=data.get('name'),
            seat=data.get('seat'),
            chips=data.get('chips'),
            is_human=data.get('is_human'),
            is_active=data.get('is_active'),
            hole_cards=_cards_from(data.get('hole_cards')),
            current_bet=data.get('current_bet', 0),
            total_contribution=data.get('total_contribution', 0),
            has_acted=data.get('has_acted', False),
            is_all_in=data.get('is_all_in', False),
            personality=data.get('personality'),
        )

    def update(self, **kwargs) -> 'Player':
        return replace(self, **kwargs)

    @property
    def can_act(self) -> bool:
        """Still in the hand with chips behind."""
        return bool(self.is_active and not self.is_all_in)


@dataclass(frozen=True)
class SidePot:
    amount: int
    eligible_players: Tuple[Any, ...]

    def to_dict(self) -> Dict:
        return {'amount': self.amount, 'eligible_players': list(self.eligible_players)}


@dataclass(frozen=True)
class PotAward:
    """Chips from one pot paid to its winners (split evenly, odd chips to the first)."""
    amount: int
    winner_ids: Tuple[Any, ...]
    hand_description: str = ''

    def to_dict(self) -> Dict:
        return {
            'amount': self.amount,
            'winner_ids': list(self.winner_ids),
            'hand_description': self.hand_description,
        }


@dataclass(frozen=True)
class HandResult:
    hand_number: int
    end_type: str                       # 'showdown' or 'fold'
    total_pot: int
    awards: Tuple[PotAward, ...] = field(default_factory=tuple)
    winnings: Tuple[Tuple[Any, int], ...] = field(default_factory=tuple)   # (player_id, chips won)

    def to_dict(self) -> Dict:
        return {
            'hand_number': self.hand_number,
            'end_type': self.end_type,
            'total_pot': self.total_pot,
            'awards': [award.to_dict() for award in self.awards],
            'winnings': dict(self.winnings),
        }


@dataclass(frozen=True)
class LastAction:
    player_id: Any
    action: str
    amount: int = 0


@dataclass(frozen=True)
class GameState:
    players: Tuple[Player, ...]
    phase: str = PLAYING
    deck: Tuple[Card, ...] = field(default_factory=tuple)
    community_cards: Tuple[Card, ...] = field(default_factory=tuple)
    burn_cards: Tuple[Card, ...] = field(default_factory=tuple)
    pot: int = 0
    side_pots: Tuple[SidePot, ...] = field(default_factory=tuple)
    current_bet: int = 0
    last_raise_size: int = 0
    dealer_button: int = 0
    small_blind: int = DEFAULT_SETTINGS['small_blind']
    big_blind: int = DEFAULT_SETTINGS['big_blind']
    ante: int = 0
    active_player: int = 0
    hand_number: int = 1
    betting_round: str = PREFLOP
    action_count: int = 0
    tournament_level: int = 1
    last_action: Optional[LastAction] = None
    ### FLAGS ###
    hand_complete: bool = False
    last_hand_result: Optional[HandResult] = None

    def to_dict(self) -> Dict:
        return {
            'phase': self.phase,
            'players': [p.to_dict() for p in self.players],
            'deck': Card.list_to_dict(self.deck),
            'community_cards': Card.list_to_dict(self.community_cards),
            'burn_cards': Card.list_to_dict(self.burn_cards),
            'pot': self.pot,
            'side_pots': [pot.to_dict() for pot in self.side_pots],
            'current_bet': self.current_bet,
            'last_raise_size': self.last_raise_size,
            'dealer_button': self.dealer_button,
            'small_blind': self.small_blind,
            'big_blind': self.big_blind,
            'ante': self.ante,
            'active_player': self.active_player,
            'hand_number': self.hand_number,
            'betting_round': self.betting_round,
            'action_count': self.action_count,
            'tournament_level': self.tournament_level,
            'last_action': None if self.last_action is None else {
                'player_id': self.last_action.player_id,
                'action': self.last_action.action,
                'amount': self.last_action.amount,
            },
            'hand_complete': self.hand_complete,
            'last_hand_result': None if self.last_hand_result is None else self.last_hand_result.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> 'GameState':
        """
        Build a game state from a dict.

        :raises StructuralError: when the players section is absent or not a list
        """
        players = data.get('players')
        if not isinstance(players, (list, tuple)):
            raise StructuralError("Game state has no players list")
        last_action = data.get('last_action')
        return cls(
            players=tuple(p if isinstance(p, Player) else Player.from_dict(p) for p in players),
            phase=data.get('phase', PLAYING),
            deck=_cards_from(data.get('deck')),
            community_cards=_cards_from(data.get('community_cards')),
            burn_cards=_cards_from(data.get('burn_cards')),
            pot=data.get('pot', 0),
            side_pots=tuple(SidePot(p['amount'], tuple(p['eligible_players']))
                            for p in data.get('side_pots') or ()),
            current_bet=data.get('current_bet', 0),
            last_raise_size=data.get('last_raise_size', 0),
            dealer_button=data.get('dealer_button', 0),
            small_blind=data.get('small_blind', DEFAULT_SETTINGS['small_blind']),
            big_blind=data.get('big_blind', DEFAULT_SETTINGS['big_blind']),
            ante=data.get('ante', 0),
            active_player=data.get('active_player', 0),
            hand_number=data.get('hand_number', 1),
            betting_round=data.get('betting_round', PREFLOP),
            action_count=data.get('action_count', 0),
            tournament_level=data.get('tournament_level', 1),
            last_action=LastAction(**last_action) if last_action else None,
            hand_complete=data.get('hand_complete', False),
        )

    @property
    def current_player(self) -> Player:
        return self.players[self.active_player]

    @property
    def active_players(self) -> Tuple[Player, ...]:
        return tuple(p for p in self.players if p.is_active)

    def update(self, **kwargs) -> 'GameState':
        return replace(self, **kwargs)

    def update_player(self, player_idx: int, **kwargs) -> 'GameState':
        """
        Update a specific player's state with the provided kwargs within a player tuple
        """
        players: List[Player] = list(self.players)
        players[player_idx] = players[player_idx].update(**kwargs)
        return self.update(players=tuple(players))

    def get_player_by_id(self, player_id: Any) -> Optional[Tuple[Player, int]]:
        for idx, player in enumerate(self.players):
            if player.id == player_id:
                return player, idx
        return None
