"""
Personality-driven decision engine for computer players.

An engine is a value built from an explicit PersonalityProfile and a random
source. Given a GameContext it scores the hand, adjusts for position and stack
depth, and walks a fixed priority of tiers (all-in, raise, call, check, fold)
to pick a legal action. All randomness (three Bernoulli draws per decision and
raise-size jitter) comes from the injected random.Random, so a seeded engine
is fully reproducible.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from core.card import Card
from .config import (
    BIG_BET_CALL_MULTIPLIER,
    BIG_BET_POT_FRACTION,
    BIG_BET_STACK_FRACTION,
    DEFAULT_POSITION_MULTIPLIER,
    DEFAULT_RAISE_POT_FRACTION,
    GREAT_POT_ODDS_FACTOR,
    POSITION_MULTIPLIERS,
    RAISE_SIZE_RANGES,
    SHORT_STACK_RATIO,
    SHORT_STACK_RISK_BOOST,
)
from .context_adapter import GameContext
from .game_state import ALL_IN, CALL, CHECK, FLOP, FOLD, RAISE, RIVER, TURN
from .hand_evaluator import evaluate_hand
from .personality import BehaviorThresholds, PersonalityProfile
from .tournament_structure import get_min_betting_increment, round_to_chip_increment

logger = logging.getLogger(__name__)

DECISION_HISTORY_LIMIT = 100

# Bluffs get more attractive from the button and once more cards are out
BUTTON_BLUFF_BOOST = 1.5
LATE_ROUND_BLUFF_BOOST = 1.25
SEMI_BLUFF_BASE = 0.1
SEMI_BLUFF_AGGRESSION = 0.2
VALUE_RAISE_MIN_AGGRESSION = 0.5
VALUE_RAISE_STRENGTH_RATIO = 0.8


@dataclass(frozen=True)
class DecisionThresholds:
    """Hand-strength cut-offs for one profile, on the evaluator's scale."""
    fold: float
    call: float
    raise_: float
    all_in: float
    pot_odds: float

    @classmethod
    def for_profile(cls, profile: PersonalityProfile) -> 'DecisionThresholds':
        return cls(
            fold=40 + 40 * profile.tightness,
            call=60 + 60 * profile.tightness,
            raise_=100 + 80 * profile.tightness + 100 * profile.aggression,
            all_in=350 + 150 * profile.risk_tolerance,
            pot_odds=1.8 + 0.7 * profile.tightness,
        )


@dataclass(frozen=True)
class AIDecision:
    action: str
    amount: int = 0
    reasoning: str = ''
    hand_strength: float = 0.0

    def to_dict(self) -> Dict:
        return {
            'action': self.action,
            'amount': self.amount,
            'reasoning': self.reasoning,
            'hand_strength': self.hand_strength,
        }


def get_position_multiplier(position: str) -> float:
    return POSITION_MULTIPLIERS.get((position or '').strip().lower(), DEFAULT_POSITION_MULTIPLIER)


class AIDecisionEngine:
    """
    Decision engine for one computer player.

    The profile is replaced whole (see update_profile), never edited field by
    field, so a decision in flight always sees one consistent personality.
    """

    def __init__(self, profile: PersonalityProfile, rng: Optional[random.Random] = None):
        self.profile = profile
        self.rng = rng or random.Random()
        self.decision_history: List[Dict] = []

    @property
    def thresholds(self) -> BehaviorThresholds:
        return self.profile.thresholds

    def update_profile(self, **traits) -> PersonalityProfile:
        self.profile = self.profile.update(**traits)
        return self.profile

    def decide(self, context: GameContext, hole_cards: Optional[Sequence[Card]] = None,
               community_cards: Optional[Sequence[Card]] = None) -> AIDecision:
        """
        Choose an action for the given context.

        Hole and community cards default to those carried on the context.
        """
        profile = self.profile
        behavior = profile.thresholds
        hole = tuple(hole_cards) if hole_cards is not None else context.hole_cards
        community = tuple(community_cards) if community_cards is not None else context.community_cards

        raw_strength = evaluate_hand(hole, community)

        position_multiplier = get_position_multiplier(context.position)
        position_adjustment = 1 + profile.adaptability * (position_multiplier - 1)
        adjusted_strength = raw_strength * position_adjustment

        stack_ratio = context.player_chips / context.pot_size if context.pot_size > 0 else math.inf
        is_short_stack = stack_ratio < SHORT_STACK_RATIO
        final_strength = adjusted_strength
        if is_short_stack:
            final_strength = adjusted_strength * (1 + profile.risk_tolerance * SHORT_STACK_RISK_BOOST)

        limits = DecisionThresholds.for_profile(profile)
        pot_odds = context.pot_odds
        has_good_pot_odds = pot_odds >= limits.pot_odds
        has_great_pot_odds = pot_odds >= limits.pot_odds * GREAT_POT_ODDS_FACTOR

        # Always draw all three so the random stream does not depend on the gates
        bluff_draw = self.rng.random()
        semi_bluff_draw = self.rng.random()
        value_raise_draw = self.rng.random()

        bluff_probability = behavior.bluff_frequency
        if context.position.strip().lower() == 'button':
            bluff_probability *= BUTTON_BLUFF_BOOST
        if context.betting_round in (TURN, RIVER):
            bluff_probability *= LATE_ROUND_BLUFF_BOOST
        should_bluff = bluff_draw < bluff_probability

        semi_bluff_probability = SEMI_BLUFF_BASE + SEMI_BLUFF_AGGRESSION * profile.aggression
        should_semi_bluff = (context.betting_round == FLOP
                             and limits.fold <= final_strength < limits.raise_
                             and semi_bluff_draw < semi_bluff_probability)

        should_value_raise = (profile.aggression >= VALUE_RAISE_MIN_AGGRESSION
                              and final_strength >= limits.raise_ * VALUE_RAISE_STRENGTH_RATIO
                              and value_raise_draw < behavior.raise_frequency)

        available = context.available_actions
        decision = None

        # Tier 1: all-in
        if final_strength >= limits.all_in and ALL_IN in available:
            decision = AIDecision(ALL_IN, context.max_raise, 'Very strong hand - all-in')

        # Tier 2: raise
        if decision is None and RAISE in available and (
                final_strength >= limits.raise_ or should_bluff or should_semi_bluff or should_value_raise):
            if final_strength >= limits.raise_:
                strategy = 'aggressive' if final_strength >= (limits.raise_ + limits.all_in) / 2 else 'value'
                reasoning = 'Strong hand - value raise' if strategy == 'value' else 'Strong hand - aggressive raise'
            elif should_semi_bluff:
                strategy, reasoning = 'aggressive', 'Semi-bluff with draws'
            elif should_value_raise:
                strategy, reasoning = 'value', 'Thin value raise'
            else:
                strategy, reasoning = 'bluff', 'Position bluff' if context.position.strip().lower() == 'button' else 'Bluff'
            amount = self.calculate_raise_amount(context, strategy)
            decision = AIDecision(RAISE, amount, reasoning)

        # Tier 3: call
        if decision is None and CALL in available:
            facing_big_bet = (context.call_amount > context.pot_size * BIG_BET_POT_FRACTION
                              or context.call_amount > context.player_chips * BIG_BET_STACK_FRACTION)
            if facing_big_bet:
                if final_strength >= limits.call * BIG_BET_CALL_MULTIPLIER:
                    decision = AIDecision(CALL, context.call_amount, 'Strong enough to call a big bet')
            elif final_strength >= limits.call:
                decision = AIDecision(CALL, context.call_amount, 'Decent hand - call')
            elif has_great_pot_odds:
                decision = AIDecision(CALL, context.call_amount, 'Great pot odds - call')
            elif has_good_pot_odds and final_strength >= limits.fold:
                decision = AIDecision(CALL, context.call_amount, 'Good pot odds - call')

        # Tier 4: check
        if decision is None and CHECK in available and final_strength >= limits.fold:
            decision = AIDecision(CHECK, 0, 'Check for a free card')

        # Tier 5: fold
        if decision is None and FOLD in available:
            decision = AIDecision(FOLD, 0, 'Weak hand - fold')

        if decision is None:
            decision = self._fallback_action(available)

        decision = AIDecision(decision.action, decision.amount, decision.reasoning, final_strength)
        self._log_decision(context, decision, raw_strength)
        return decision

    def calculate_raise_amount(self, context: GameContext, strategy: str = 'value') -> int:
        """
        Raise TO amount for a sub-strategy ('value', 'aggressive', 'bluff').

        The pot fraction is drawn from the strategy's range, scaled by the
        profile's sizing multiplier, clamped to the legal window and rounded to
        a bet the level's chips can make.
        """
        profile = self.profile
        behavior = profile.thresholds

        if strategy in RAISE_SIZE_RANGES:
            low, high = RAISE_SIZE_RANGES[strategy]
            fraction = self.rng.uniform(low, high)
        else:
            fraction = DEFAULT_RAISE_POT_FRACTION

        scale = behavior.betting_size_multiplier * (1 + 0.2 * profile.aggression + 0.1 * profile.risk_tolerance)
        table_bet = context.player_current_bet + context.call_amount
        target = table_bet + int(context.pot_size * fraction * scale)

        minimum, maximum = context.min_raise, context.max_raise
        clamped = max(minimum, min(target, maximum))
        return fit_to_chip_increment(clamped, minimum, maximum, context.tournament_level)

    def _fallback_action(self, available: Sequence[str]) -> AIDecision:
        if available:
            logger.debug(f"No decision tier matched; falling back to {available[0]}")
            return AIDecision(available[0], 0, 'Emergency fallback decision')
        logger.warning('Decision requested with no legal actions; folding')
        return AIDecision(FOLD, 0, 'No legal actions available')

    def _log_decision(self, context: GameContext, decision: AIDecision, raw_strength: float) -> None:
        record = {
            'betting_round': context.betting_round,
            'position': context.position,
            'raw_strength': raw_strength,
            'final_strength': decision.hand_strength,
            'pot_odds': context.pot_odds,
            'call_amount': context.call_amount,
            'action': decision.action,
            'amount': decision.amount,
            'reasoning': decision.reasoning,
            'profile': self.profile.name,
        }
        self.decision_history.append(record)
        if len(self.decision_history) > DECISION_HISTORY_LIMIT:
            del self.decision_history[:-DECISION_HISTORY_LIMIT]

        logger.debug(
            f"[AI] {self.profile.name}: {decision.action} {decision.amount or ''} "
            f"(strength={decision.hand_strength:.1f}, pot_odds={context.pot_odds:.1f}) - {decision.reasoning}"
        )


def fit_to_chip_increment(amount: int, minimum: int, maximum: int, level: int) -> int:
    """
    Round a raise to the level's chip increment while staying inside
    [minimum, maximum]. When no multiple of the increment fits the window the
    all-in total is used, since a player's whole stack is always payable.
    """
    increment = get_min_betting_increment(level)
    rounded = round_to_chip_increment(amount, level)
    if rounded > maximum:
        rounded -= increment * math.ceil((rounded - maximum) / increment)
    if rounded < minimum:
        rounded += increment * math.ceil((minimum - rounded) / increment)
    if minimum <= rounded <= maximum:
        return rounded
    return maximum


def get_ai_decision(context: GameContext, profile: PersonalityProfile,
                    rng: Optional[random.Random] = None) -> AIDecision:
    """One-shot decision for a context without keeping an engine around."""
    return AIDecisionEngine(profile, rng).decide(context)
