from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

SUITS = ('♠', '♥', '♦', '♣')
RANKS = ('2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K', 'A')
RANK_VALUES = {rank: value for value, rank in enumerate(RANKS, start=2)}

SUIT_NAMES = {'Spades': '♠', 'Hearts': '♥', 'Diamonds': '♦', 'Clubs': '♣'}
RED_SUITS = frozenset({'♥', '♦'})

# Single-character ranks seen in shorthand like "Th" or "AsKd"
_SHORT_RANKS = {'T': '10'}
_SHORT_SUITS = {'s': '♠', 'h': '♥', 'd': '♦', 'c': '♣'}


def get_rank_value(rank: str) -> int:
    """Numeric value of a rank symbol; 0 for anything unrecognised."""
    return RANK_VALUES.get(rank, 0)


@dataclass(frozen=True)
class Card:
    """
    A playing card.

    Attributes:
        rank: One of RANKS ('2'..'10', 'J', 'Q', 'K', 'A').
        suit: One of the suit symbols in SUITS.
        value: Numeric rank value 2-14. Derived from the rank when omitted.

    Cards are immutable and hashable. Equality and duplicate detection use
    the rank+suit identity exposed by `key`.
    """
    rank: str
    suit: str
    value: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        if self.value is None:
            object.__setattr__(self, 'value', get_rank_value(self.rank))

    @property
    def key(self) -> str:
        return f"{self.rank}{self.suit}"

    @property
    def is_red(self) -> bool:
        return self.suit in RED_SUITS

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rank': self.rank,
            'suit': self.suit,
            'value': self.value,
        }

    @staticmethod
    def list_to_dict(card_list: Iterable['Card']) -> List[Dict[str, Any]]:
        return [card.to_dict() for card in card_list]

    @classmethod
    def from_dict(cls, card_dict: Dict[str, Any]) -> 'Card':
        rank = card_dict['rank']
        suit_input = card_dict['suit']
        # Accept full suit names as well as symbols
        suit = SUIT_NAMES.get(suit_input, suit_input)
        return cls(rank, suit, card_dict.get('value'))

    @classmethod
    def list_from_dict_list(cls, card_dict_list: Iterable[Dict[str, Any]]) -> List['Card']:
        return [cls.from_dict(card_dict) for card_dict in card_dict_list]

    @classmethod
    def parse(cls, text: str) -> 'Card':
        """Build a card from shorthand such as 'As', 'Th', '10♦' or 'K♣'."""
        text = text.strip()
        rank, suit = text[:-1], text[-1]
        rank = _SHORT_RANKS.get(rank, rank).upper()
        suit = _SHORT_SUITS.get(suit.lower(), suit)
        return cls(rank, suit)

    def __str__(self):
        return f"{self.rank}{self.suit}"


def is_valid_card(card: Any) -> bool:
    """
    Check that a card is well formed: a known suit symbol, a known rank and a
    value consistent with that rank.
    """
    if not isinstance(card, Card):
        return False
    if card.suit not in SUITS or card.rank not in RANKS:
        return False
    return card.value == RANK_VALUES[card.rank]


def is_red_card(card: Card) -> bool:
    return card.suit in RED_SUITS


def format_card(card: Optional[Card]) -> str:
    if card is None:
        return '??'
    return str(card)


def format_cards(cards: Iterable[Card]) -> str:
    return ' '.join(format_card(card) for card in cards)
