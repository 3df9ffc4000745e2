"""
Poker tournament core for Texas Hold'em: tournament structure, hand
evaluation, action legality, state validation and personality-driven AI.
"""

from .ai_decision_engine import AIDecision, AIDecisionEngine, get_ai_decision
from .betting_context import BettingContext, get_available_actions, validate_player_action
from .context_adapter import GameContext, extract_game_context
from .errors import ActionRejected, InvariantViolation, PokerError, StructuralError, ValidationResult
from .game_state import GameState, Player
from .game_validator import quick_validate, validate_game_state
from .hand_evaluator import HandEvaluator, evaluate_hand
from .hand_flow import initialize_game, play_turn, start_new_hand
from .personality import PERSONALITY_PROFILES, PersonalityProfile, resolve_profile
from .tournament_structure import get_blind_level, get_tournament_phase, round_to_chip_increment

__all__ = [
    'AIDecision',
    'AIDecisionEngine',
    'get_ai_decision',
    'BettingContext',
    'get_available_actions',
    'validate_player_action',
    'GameContext',
    'extract_game_context',
    'ActionRejected',
    'InvariantViolation',
    'PokerError',
    'StructuralError',
    'ValidationResult',
    'GameState',
    'Player',
    'quick_validate',
    'validate_game_state',
    'HandEvaluator',
    'evaluate_hand',
    'initialize_game',
    'play_turn',
    'start_new_hand',
    'PERSONALITY_PROFILES',
    'PersonalityProfile',
    'resolve_profile',
    'get_blind_level',
    'get_tournament_phase',
    'round_to_chip_increment',
]
