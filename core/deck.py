import random
from typing import Iterable, Optional, Sequence, Tuple

from core.card import Card, RANKS, SUITS, is_valid_card
from poker.errors import DeckError

Deck = Tuple[Card, ...]


def create_deck(rng: Optional[random.Random] = None, shuffled: bool = True) -> Deck:
    """
    Create a 52 card deck. When shuffled, the order comes from `rng` so a
    seeded random.Random reproduces the same deck.
    """
    deck = tuple(Card(rank, suit) for suit in SUITS for rank in RANKS)
    if shuffled:
        deck = shuffle_deck(deck, rng)
    return deck


def shuffle_deck(cards: Sequence[Card], rng: Optional[random.Random] = None) -> Deck:
    """Fisher-Yates shuffle returning a new tuple; the input is left untouched."""
    rng = rng or random.Random()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return tuple(shuffled)


def deal_cards(deck: Sequence[Card], num_cards: int) -> Tuple[Deck, Deck]:
    """
    Deal cards off the end of the deck.

    :return: (dealt_cards, remaining_deck)
    :raises DeckError: if the deck holds fewer than num_cards cards
    """
    if num_cards > len(deck):
        raise DeckError("Not enough cards in deck")
    if num_cards <= 0:
        return (), tuple(deck)
    remaining = tuple(deck[:-num_cards])
    # Popping one at a time takes the last card first
    dealt = tuple(reversed(deck[-num_cards:]))
    return dealt, remaining


def burn_card(deck: Sequence[Card]) -> Tuple[Card, Deck]:
    """Remove the top card face down. Returns (burned_card, remaining_deck)."""
    if not deck:
        raise DeckError("Cannot burn card from empty deck")
    return deck[-1], tuple(deck[:-1])


def is_complete_deck(cards: Iterable[Card]) -> bool:
    """True when the cards are exactly the 52 distinct, well formed cards."""
    cards = list(cards)
    if len(cards) != 52 or not all(is_valid_card(card) for card in cards):
        return False
    return len({card.key for card in cards}) == 52
