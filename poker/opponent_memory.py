"""
Opponent memory.

Tracks each opponent's observed actions and smooths them into play-style
patterns the AI can consult: how aggressive and how tight a player is, how
often they bluff, and whether they respect position and pot odds.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .config import (
    BAD_CALL_POT_ODDS,
    GOOD_CALL_POT_ODDS,
    OPPONENT_ACTION_HISTORY_LIMIT,
    OPPONENT_EXPORT_ACTION_LIMIT,
    OPPONENT_FAST_LEARNING_RATE,
    OPPONENT_MIN_RELIABILITY,
    OPPONENT_PATTERN_WINDOW,
    OPPONENT_RELIABLE_ACTION_COUNT,
    OPPONENT_SLOW_LEARNING_RATE,
    OPPONENT_TENDENCY_LEARNING_RATE,
)
from .game_state import ALL_IN, CALL, FOLD, RAISE

logger = logging.getLogger(__name__)

LATE_POSITIONS = ('Button', 'Cutoff')
EARLY_POSITIONS = ('Under the Gun', 'Early Position')
AGGRESSIVE_ACTIONS = (RAISE, ALL_IN)


def smooth_update(old_value: float, new_value: float, learning_rate: float) -> float:
    """Exponential moving average step."""
    return old_value * (1 - learning_rate) + new_value * learning_rate


@dataclass
class ObservedAction:
    """One action seen from an opponent."""
    hand_number: int
    betting_round: str
    action: str
    amount: int = 0
    position: str = ''
    pot_size: int = 0
    stack_size: int = 0
    opponents_in_hand: int = 0
    pot_odds: Optional[float] = None
    was_raised: bool = False
    is_bluff: bool = False
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ObservedAction':
        data = dict(data)
        timestamp = data.pop('timestamp', None)
        action = cls(**data)
        if isinstance(timestamp, str):
            action.timestamp = datetime.fromisoformat(timestamp)
        return action


@dataclass
class PlayPatterns:
    """Smoothed frequencies, all in 0-1."""
    aggression: float = 0.5
    tightness: float = 0.5
    bluff_frequency: float = 0.1
    fold_to_bet: float = 0.6
    raise_frequency: float = 0.2
    call_frequency: float = 0.3


@dataclass
class PlayerStats:
    hands_played: int = 0
    total_actions: int = 0
    showdowns: int = 0
    wins: int = 0
    biggest_pot: int = 0


@dataclass
class PlayerTendencies:
    positional_play: float = 0.5
    pot_odds_awareness: float = 0.5
    adaptability: float = 0.5


@dataclass
class OpponentProfile:
    """Everything remembered about one opponent."""
    player_id: Any
    name: str
    actions: List[ObservedAction] = field(default_factory=list)
    patterns: PlayPatterns = field(default_factory=PlayPatterns)
    stats: PlayerStats = field(default_factory=PlayerStats)
    tendencies: PlayerTendencies = field(default_factory=PlayerTendencies)

    @property
    def reliability(self) -> float:
        """Confidence in the patterns, growing with the number of actions seen."""
        return min(1.0, self.stats.total_actions / OPPONENT_RELIABLE_ACTION_COUNT)

    def to_dict(self, action_limit: Optional[int] = None) -> Dict[str, Any]:
        actions = self.actions if action_limit is None else self.actions[-action_limit:]
        return {
            'player_id': self.player_id,
            'name': self.name,
            'actions': [a.to_dict() for a in actions],
            'patterns': asdict(self.patterns),
            'stats': asdict(self.stats),
            'tendencies': asdict(self.tendencies),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OpponentProfile':
        return cls(
            player_id=data['player_id'],
            name=data.get('name', str(data['player_id'])),
            actions=[ObservedAction.from_dict(a) for a in data.get('actions', [])],
            patterns=PlayPatterns(**data.get('patterns', {})),
            stats=PlayerStats(**data.get('stats', {})),
            tendencies=PlayerTendencies(**data.get('tendencies', {})),
        )


def analyze_positional_play(actions: List[ObservedAction]) -> float:
    """
    How much more aggressive a player is in late position than early, centred
    on 0.5. Returns 0.5 until both late and early actions have been seen.
    """
    late_total = late_aggressive = early_total = early_aggressive = 0
    for action in actions:
        aggressive = action.action in AGGRESSIVE_ACTIONS
        if action.position in LATE_POSITIONS:
            late_total += 1
            late_aggressive += aggressive
        elif action.position in EARLY_POSITIONS:
            early_total += 1
            early_aggressive += aggressive

    if late_total == 0 or early_total == 0:
        return 0.5
    return min(1.0, late_aggressive / late_total - early_aggressive / early_total + 0.5)


def analyze_pot_odds_awareness(actions: List[ObservedAction]) -> float:
    """Share of priced decisions that respected the pot odds (calls at good odds, folds at bad)."""
    good = total = 0
    for action in actions:
        if not action.pot_odds:
            continue
        total += 1
        if action.action == CALL and action.pot_odds > GOOD_CALL_POT_ODDS:
            good += 1
        elif action.action == FOLD and action.pot_odds < BAD_CALL_POT_ODDS:
            good += 1
    return good / total if total else 0.5


class OpponentMemory:
    """Memory of every opponent at the table, keyed by player id."""

    def __init__(self):
        self.players: Dict[Any, OpponentProfile] = {}
        self.total_hands = 0
        self.total_actions = 0

    def initialize_player(self, player_id: Any, name: str) -> OpponentProfile:
        if player_id not in self.players:
            self.players[player_id] = OpponentProfile(player_id=player_id, name=name)
        return self.players[player_id]

    def record_action(self, player_id: Any, observed: ObservedAction) -> None:
        """Record an action and update the player's patterns. Unknown players are ignored."""
        profile = self.players.get(player_id)
        if profile is None:
            logger.debug(f"Ignoring action for unknown player {player_id}")
            return

        profile.actions.append(observed)
        profile.stats.total_actions += 1
        if len(profile.actions) > OPPONENT_ACTION_HISTORY_LIMIT:
            del profile.actions[:-OPPONENT_ACTION_HISTORY_LIMIT]

        self._update_patterns(profile)
        self.total_actions += 1

    def _update_patterns(self, profile: OpponentProfile) -> None:
        recent = profile.actions[-OPPONENT_PATTERN_WINDOW:]
        count = len(recent)
        patterns = profile.patterns

        def share(*actions: str) -> float:
            return sum(1 for a in recent if a.action in actions) / count

        patterns.aggression = smooth_update(patterns.aggression, share(*AGGRESSIVE_ACTIONS),
                                            OPPONENT_FAST_LEARNING_RATE)
        patterns.tightness = smooth_update(patterns.tightness, share(FOLD), OPPONENT_FAST_LEARNING_RATE)
        patterns.raise_frequency = smooth_update(patterns.raise_frequency, share(RAISE),
                                                 OPPONENT_SLOW_LEARNING_RATE)
        patterns.call_frequency = smooth_update(patterns.call_frequency, share(CALL),
                                                OPPONENT_SLOW_LEARNING_RATE)

        tendencies = profile.tendencies
        tendencies.positional_play = smooth_update(tendencies.positional_play,
                                                   analyze_positional_play(recent),
                                                   OPPONENT_TENDENCY_LEARNING_RATE)
        tendencies.pot_odds_awareness = smooth_update(tendencies.pot_odds_awareness,
                                                      analyze_pot_odds_awareness(recent),
                                                      OPPONENT_TENDENCY_LEARNING_RATE)

    def record_hand_result(self, player_id: Any, hand_number: int, won: bool = False,
                           showdown: bool = False, pot_won: int = 0, was_bluff: bool = False) -> None:
        profile = self.players.get(player_id)
        if profile is None:
            return

        profile.stats.hands_played += 1
        if showdown:
            profile.stats.showdowns += 1
        if won:
            profile.stats.wins += 1
            profile.stats.biggest_pot = max(profile.stats.biggest_pot, pot_won)

        if was_bluff:
            bluffed = any(a.hand_number == hand_number and a.is_bluff for a in profile.actions)
            profile.patterns.bluff_frequency = smooth_update(
                profile.patterns.bluff_frequency, 1.0 if bluffed else 0.0, OPPONENT_FAST_LEARNING_RATE)

    def record_hand_completed(self) -> None:
        self.total_hands += 1

    def get_player_tendencies(self, player_id: Any) -> Optional[Dict[str, Any]]:
        profile = self.players.get(player_id)
        if profile is None:
            return None
        return {
            'patterns': asdict(profile.patterns),
            'tendencies': asdict(profile.tendencies),
            'stats': asdict(profile.stats),
            'reliability': profile.reliability,
        }

    def get_strategic_advice(self, opponent_id: Any) -> Dict[str, Any]:
        """
        Plain-language advice on how to play against an opponent, with a
        confidence equal to the memory's reliability for that player.
        """
        profile = self.players.get(opponent_id)
        if profile is None or profile.reliability < OPPONENT_MIN_RELIABILITY:
            return {'advice': 'Insufficient data', 'confidence': 0}

        patterns = profile.patterns
        notes = []
        if patterns.aggression > 0.7:
            notes.append('Opponent is very aggressive - consider tighter play and trap with strong hands')
        elif patterns.aggression < 0.3:
            notes.append('Opponent is passive - you can be more aggressive and bluff more often')

        if patterns.tightness > 0.7:
            notes.append('Very tight player - their bets usually indicate strong hands')
        elif patterns.tightness < 0.3:
            notes.append('Loose player - they play many hands, value bet more thinly')

        if patterns.bluff_frequency > 0.3:
            notes.append('High bluff frequency - call down lighter')

        if profile.tendencies.positional_play > 0.6:
            notes.append('Position-aware player - expect more aggression in late position')

        return {
            'advice': '. '.join(notes),
            'confidence': profile.reliability,
            'patterns': asdict(patterns),
        }

    def export_memory(self) -> Dict[str, Any]:
        """Serializable snapshot; only the most recent actions per player are kept."""
        return {
            'players': {str(pid): profile.to_dict(OPPONENT_EXPORT_ACTION_LIMIT)
                        for pid, profile in self.players.items()},
            'global_stats': {'total_hands': self.total_hands, 'total_actions': self.total_actions},
            'timestamp': datetime.now().isoformat(),
        }

    def import_memory(self, data: Optional[Dict[str, Any]]) -> None:
        if not data or 'players' not in data:
            return
        global_stats = data.get('global_stats') or {}
        self.total_hands = global_stats.get('total_hands', self.total_hands)
        self.total_actions = global_stats.get('total_actions', self.total_actions)
        for profile_data in data['players'].values():
            profile = OpponentProfile.from_dict(profile_data)
            self.players[profile.player_id] = profile

    def clear(self) -> None:
        self.players.clear()
        self.total_hands = 0
        self.total_actions = 0

    def get_memory_stats(self) -> Dict[str, Any]:
        return {
            'total_players': len(self.players),
            'global_stats': {'total_hands': self.total_hands, 'total_actions': self.total_actions},
            'player_summaries': [
                {
                    'id': pid,
                    'name': profile.name,
                    'total_actions': profile.stats.total_actions,
                    'hands_played': profile.stats.hands_played,
                    'reliability': profile.reliability,
                    'patterns': {
                        'aggression': round(profile.patterns.aggression, 2),
                        'tightness': round(profile.patterns.tightness, 2),
                        'bluff_frequency': round(profile.patterns.bluff_frequency, 2),
                    },
                }
                for pid, profile in self.players.items()
            ],
        }
