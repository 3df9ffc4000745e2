"""
In-memory hand log.

Records what happened at the table (player actions, AI reasoning, hand
results and state transitions) as structured entries that can be filtered
and exported as JSON for later review. Entries are also mirrored to the
module logger at debug level.
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .config import HAND_LOG_MAX_ENTRIES
from .game_state import GameState, HandResult, Player

logger = logging.getLogger(__name__)

MAX_STRING_LENGTH = 1000
REASONING_PREVIEW_LENGTH = 100

# Categories
GAME = 'game'
PLAYER = 'player'
AI = 'ai'
SYSTEM = 'system'


def _limit_strings(value: Any, max_length: int = MAX_STRING_LENGTH) -> Any:
    if isinstance(value, str):
        return value if len(value) <= max_length else value[:max_length] + '...'
    if isinstance(value, (list, tuple)):
        return [_limit_strings(item, max_length) for item in value]
    if isinstance(value, dict):
        return {key: _limit_strings(item, max_length) for key, item in value.items()}
    return value


def extract_log_context(game_state: Optional[GameState]) -> Dict[str, Any]:
    """The slice of a game state worth keeping next to every entry."""
    if game_state is None:
        return {}
    return {
        'hand_number': game_state.hand_number,
        'betting_round': game_state.betting_round,
        'active_player': game_state.active_player,
        'current_bet': game_state.current_bet,
        'pot': game_state.pot,
        'phase': game_state.phase,
        'active_players': len(game_state.active_players),
        'community_card_count': len(game_state.community_cards),
    }


@dataclass(frozen=True)
class LogEntry:
    level: str
    category: str
    event: str
    data: Dict[str, Any] = field(default_factory=dict)
    context: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'timestamp': self.timestamp.isoformat(),
            'level': self.level,
            'category': self.category,
            'event': self.event,
            'data': self.data,
            'context': self.context,
        }


class HandLog:
    """Bounded log of table events for one session."""

    def __init__(self, max_entries: int = HAND_LOG_MAX_ENTRIES):
        self.max_entries = max_entries
        self.session_id = f"poker_{uuid.uuid4().hex[:12]}"
        self.start_time = datetime.now()
        self.entries: List[LogEntry] = []
        self.ai_entries: List[Dict[str, Any]] = []
        self.enabled = True

    def log(self, level: str, category: str, event: str, data: Optional[Dict[str, Any]] = None,
            game_state: Optional[GameState] = None) -> Optional[LogEntry]:
        if not self.enabled:
            return None
        entry = LogEntry(level=level, category=category, event=event,
                         data=_limit_strings(dict(data or {})),
                         context=extract_log_context(game_state))
        self.entries.append(entry)
        if len(self.entries) > self.max_entries:
            del self.entries[:-self.max_entries]
        logger.debug(f"[{category}] {event}: {entry.data}")
        return entry

    def log_player_action(self, player: Player, action: str, amount: int,
                          game_state: Optional[GameState] = None, **extra) -> Optional[LogEntry]:
        return self.log('info', PLAYER, 'action', {
            'player_id': player.id,
            'player_name': player.name,
            'is_human': player.is_human,
            'action': action,
            'amount': amount,
            'player_chips': player.chips,
            'player_current_bet': player.current_bet,
            **extra,
        }, game_state)

    def log_ai_reasoning(self, player: Player, profile_name: str, decision: Dict[str, Any],
                         reasoning: str, game_state: Optional[GameState] = None) -> Optional[LogEntry]:
        if not self.enabled:
            return None
        self.ai_entries.append({
            'player_id': player.id,
            'player_name': player.name,
            'strategy': profile_name,
            'decision': decision,
            'reasoning': reasoning,
            'hand_number': game_state.hand_number if game_state is not None else None,
            'timestamp': datetime.now().isoformat(),
        })
        if len(self.ai_entries) > self.max_entries:
            del self.ai_entries[:-self.max_entries]

        preview = reasoning if len(reasoning) <= REASONING_PREVIEW_LENGTH \
            else reasoning[:REASONING_PREVIEW_LENGTH] + '...'
        return self.log('info', AI, 'reasoning', {
            'player': player.name,
            'strategy': profile_name,
            'decision': decision,
            'reasoning': preview,
        }, game_state)

    def log_hand_result(self, result: HandResult, game_state: Optional[GameState] = None) -> Optional[LogEntry]:
        data = result.to_dict()
        if game_state is not None:
            data['community_cards'] = [str(card) for card in game_state.community_cards]
            data['side_pots'] = [pot.to_dict() for pot in game_state.side_pots]
        return self.log('info', GAME, result.end_type, data, game_state)

    def log_state_change(self, old_state: GameState, new_state: GameState,
                         trigger: str) -> Optional[LogEntry]:
        watched = ('hand_number', 'betting_round', 'active_player', 'current_bet', 'pot', 'phase')
        changes = {key: {'from': getattr(old_state, key), 'to': getattr(new_state, key)}
                   for key in watched if getattr(old_state, key) != getattr(new_state, key)}
        if not changes:
            return None
        return self.log('debug', GAME, 'state_change', {'trigger': trigger, 'changes': changes}, new_state)

    def log_error(self, error: Exception, where: str, game_state: Optional[GameState] = None) -> Optional[LogEntry]:
        return self.log('error', SYSTEM, 'error', {
            'message': str(error),
            'context': where,
            'error_type': type(error).__name__,
        }, game_state)

    def get_logs(self, level: Optional[str] = None, category: Optional[str] = None,
                 event: Optional[str] = None, hand_number: Optional[int] = None,
                 player_id: Any = None) -> List[LogEntry]:
        """Entries matching every given filter, newest first."""
        matches = [
            entry for entry in self.entries
            if (level is None or entry.level == level)
            and (category is None or entry.category == category)
            and (event is None or entry.event == event)
            and (hand_number is None or entry.context.get('hand_number') == hand_number)
            and (player_id is None or entry.data.get('player_id') == player_id)
        ]
        return list(reversed(matches))

    def export_logs(self) -> str:
        return json.dumps({
            'session_id': self.session_id,
            'start_time': self.start_time.isoformat(),
            'end_time': datetime.now().isoformat(),
            'logs': [entry.to_dict() for entry in self.entries],
            'ai_logs': self.ai_entries,
        }, indent=2, default=str)

    def clear(self) -> None:
        self.entries.clear()
        self.ai_entries.clear()

    def get_stats(self) -> Dict[str, Any]:
        by_category: Dict[str, int] = {}
        by_level: Dict[str, int] = {}
        for entry in self.entries:
            by_category[entry.category] = by_category.get(entry.category, 0) + 1
            by_level[entry.level] = by_level.get(entry.level, 0) + 1
        return {
            'session_id': self.session_id,
            'session_duration': (datetime.now() - self.start_time).total_seconds(),
            'total_logs': len(self.entries),
            'total_ai_logs': len(self.ai_entries),
            'logs_by_category': by_category,
            'logs_by_level': by_level,
            'max_entries': self.max_entries,
        }
