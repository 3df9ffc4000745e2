from collections import Counter
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from core.card import Card

# Returned when there are not two hole cards to score
DEFAULT_WEAK_STRENGTH = 200

# Postflop category bands; each category owns [base, base + 100)
HIGH_CARD = 0
ONE_PAIR = 100
TWO_PAIR = 200
THREE_OF_A_KIND = 300
STRAIGHT = 400
FLUSH = 500
FULL_HOUSE = 600
FOUR_OF_A_KIND = 700
STRAIGHT_FLUSH = 800


@dataclass(frozen=True)
class HandEvaluation:
    strength: float
    description: str
    cards: Tuple[Card, ...]


class HandEvaluator:
    """
        Class HandEvaluator:
            Scores two hole cards plus zero to five community cards into a single
            strength number.

        Preflop hands get a tiered starting-hand score (pairs 500-950, other
        holdings by their high/low combination). Postflop hands are classified
        into nine categories, each mapped to its own band of 100 points, with
        kicker ranks added as fractional tie-breaks:

            straight flush 800+ > four of a kind 700+ > full house 600+ >
            flush 500+ > straight 400+ > trips 300+ > two pair 200+ >
            pair 100+ > high card (below 29)

        The postflop pass is a quick approximation rather than a best-five-of-
        seven search: a straight flush is reported whenever the cards hold both
        a flush and a straight, and the flush score only looks at its top two
        cards.
    """
    def __init__(self, hole_cards: Sequence[Card], community_cards: Sequence[Card] = ()):
        self.hole_cards = tuple(hole_cards)
        self.community_cards = tuple(community_cards)
        self.cards = self.hole_cards + self.community_cards
        self.ranks = [card.value for card in self.cards]
        self.suits = [card.suit for card in self.cards]
        self.rank_counts = Counter(self.ranks)
        self.suit_counts = Counter(self.suits)

    def evaluate(self) -> HandEvaluation:
        strength, description = self._score()
        return HandEvaluation(strength=strength, description=description, cards=self.cards)

    def _score(self) -> Tuple[float, str]:
        if len(self.hole_cards) < 2:
            return DEFAULT_WEAK_STRENGTH, "Unknown"
        if not self.community_cards:
            return self._score_preflop()

        checks = [
            self._check_straight_flush,
            self._check_four_of_a_kind,
            self._check_full_house,
            self._check_flush,
            self._check_straight,
            self._check_three_of_a_kind,
            self._check_two_pair,
            self._check_one_pair,
        ]
        for check in checks:
            result = check()
            if result is not None:
                return result
        return self._high_card()

    # ---- Preflop -------------------------------------------------------

    def _score_preflop(self) -> Tuple[float, str]:
        first, second = self.hole_cards[:2]
        high = max(first.value, second.value)
        low = min(first.value, second.value)
        suited = first.suit == second.suit
        connected = high - low == 1

        if high == low:
            return 500 + (high - 2) * 37.5, f"Pocket {_rank_name(high)}s"

        suited_label = 'suited' if suited else 'offsuit'
        description = f"{_rank_name(high)}-{_rank_name(low)} {suited_label}"

        if low >= 10 and high >= 12:
            bonus = (20 if suited else 0) + (10 if connected else 0)
            if high == 14:
                return 650 + (low - 10) * 20 + bonus, description
            if high == 13:
                return 550 + (low - 10) * 15 + bonus, description
            return 450 + (low - 10) * 10 + bonus, description
        if suited and connected and high >= 8:
            return 400 + high * 10, description
        if suited and high >= 10:
            return 350 + high * 8 + low, description
        if connected and high >= 9:
            return 300 + high * 5, description
        if high >= 12:
            return 250 + high * 8 + low, description

        bonus = (15 if suited else 0) + (10 if connected else 0)
        return 150 + high * 5 + low * 2 + bonus, description

    # ---- Postflop ------------------------------------------------------

    def _kickers(self, *exclude: int) -> list:
        return sorted((rank for rank in self.ranks if rank not in exclude), reverse=True)

    def _straight_top(self) -> Optional[int]:
        values = set(self.ranks)
        if 14 in values:
            values.add(1)
        for top in range(14, 4, -1):
            if all(rank in values for rank in range(top - 4, top + 1)):
                return top
        return None

    def _flush_suit(self) -> Optional[str]:
        for suit, count in self.suit_counts.most_common():
            if count >= 5:
                return suit
        return None

    def _check_straight_flush(self):
        top = self._straight_top()
        if top is not None and self._flush_suit() is not None:
            name = "Royal Flush" if top == 14 else f"{_rank_name(top)} high Straight Flush"
            return STRAIGHT_FLUSH + top * 5, name
        return None

    def _check_four_of_a_kind(self):
        for rank, count in self.rank_counts.items():
            if count >= 4:
                kicker = next(iter(self._kickers(rank)), 0)
                return FOUR_OF_A_KIND + rank * 5 + kicker / 15, f"Four of a kind, {_rank_name(rank)}s"
        return None

    def _check_full_house(self):
        three = None
        two = None
        for rank, count in sorted(self.rank_counts.items(), reverse=True):
            if count >= 3 and three is None:
                three = rank
            elif count >= 2 and two is None:
                two = rank
        if three is not None and two is not None:
            return (FULL_HOUSE + three * 5 + two * 0.3,
                    f"Full House, {_rank_name(three)}s over {_rank_name(two)}s")
        return None

    def _check_flush(self):
        suit = self._flush_suit()
        if suit is None:
            return None
        flush_values = sorted((card.value for card in self.cards if card.suit == suit), reverse=True)
        return FLUSH + flush_values[0] * 5 + flush_values[1] / 15, f"{_rank_name(flush_values[0])} high Flush"

    def _check_straight(self):
        top = self._straight_top()
        if top is None:
            return None
        return STRAIGHT + top * 5, f"{_rank_name(top)} high Straight"

    def _check_three_of_a_kind(self):
        trips = [rank for rank, count in self.rank_counts.items() if count == 3]
        if trips:
            rank = max(trips)
            kicker = next(iter(self._kickers(rank)), 0)
            return THREE_OF_A_KIND + rank * 5 + kicker / 15, f"Three of a kind, {_rank_name(rank)}s"
        return None

    def _check_two_pair(self):
        pairs = sorted((rank for rank, count in self.rank_counts.items() if count >= 2), reverse=True)
        if len(pairs) >= 2:
            high, low = pairs[:2]
            kicker = next(iter(self._kickers(high, low)), 0)
            return (TWO_PAIR + high * 5 + low * 0.3 + kicker / 100,
                    f"Two Pair, {_rank_name(high)}s and {_rank_name(low)}s")
        return None

    def _check_one_pair(self):
        pairs = [rank for rank, count in self.rank_counts.items() if count >= 2]
        if pairs:
            rank = max(pairs)
            kicker = next(iter(self._kickers(rank)), 0)
            return ONE_PAIR + rank * 5 + kicker / 15, f"Pair of {_rank_name(rank)}s"
        return None

    def _high_card(self) -> Tuple[float, str]:
        ordered = sorted(self.ranks, reverse=True)
        high = ordered[0]
        kicker = ordered[1] if len(ordered) > 1 else 0
        return HIGH_CARD + high * 2 + kicker / 15, f"{_rank_name(high)} High"


_RANK_NAMES = {11: 'Jack', 12: 'Queen', 13: 'King', 14: 'Ace'}


def _rank_name(value: int) -> str:
    return _RANK_NAMES.get(value, str(value))


def evaluate_hand(hole_cards: Sequence[Card], community_cards: Sequence[Card] = ()) -> float:
    """Strength score for a hand; see HandEvaluator for the scale."""
    return HandEvaluator(hole_cards, community_cards).evaluate().strength


def describe_hand(hole_cards: Sequence[Card], community_cards: Sequence[Card] = ()) -> str:
    return HandEvaluator(hole_cards, community_cards).evaluate().description
