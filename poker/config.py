"""
Centralized configuration for the poker tournament core.
Eliminates magic numbers scattered throughout the codebase.

Runtime settings are read from the environment (a .env file is loaded when
present); everything else is a module-level constant.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == '':
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


# Logging
LOG_LEVEL = os.environ.get('POKER_LOG_LEVEL', 'INFO').upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Randomness (unset means nondeterministic)
_seed = os.environ.get('POKER_RANDOM_SEED')
RANDOM_SEED = int(_seed) if _seed and _seed.strip() else None

# Game setup
STARTING_CHIPS = _env_int('POKER_STARTING_CHIPS', 60000)

# Validation
HIGH_ACTION_COUNT_WARNING = _env_int('POKER_HIGH_ACTION_WARNING', 100)  # Possible stuck betting loop

# Hand log
HAND_LOG_MAX_ENTRIES = _env_int('POKER_HAND_LOG_MAX_ENTRIES', 1000)

# AI decision engine
SHORT_STACK_RATIO = 10          # Stack / pot below this is a short stack
SHORT_STACK_RISK_BOOST = 0.3    # Strength boost per unit of risk tolerance when short
GREAT_POT_ODDS_FACTOR = 1.3     # Great pot odds = threshold * this
BIG_BET_POT_FRACTION = 0.5      # Facing more than this share of the pot is a big bet
BIG_BET_STACK_FRACTION = 0.8    # ...or more than this share of the stack
BIG_BET_CALL_MULTIPLIER = 1.5   # Call threshold multiplier when facing a big bet

POSITION_MULTIPLIERS = {
    'button': 1.15,
    'cutoff': 1.05,
    'small blind': 0.95,
    'big blind': 1.0,
    'under the gun': 0.85,
}
DEFAULT_POSITION_MULTIPLIER = 0.95

# Pot-fraction ranges for raise sizing, by sub-strategy: (low, high)
RAISE_SIZE_RANGES = {
    'value': (0.5, 0.8),
    'aggressive': (0.8, 1.2),
    'bluff': (0.6, 0.8),
}
DEFAULT_RAISE_POT_FRACTION = 0.6

# Opponent memory
OPPONENT_ACTION_HISTORY_LIMIT = 200
OPPONENT_PATTERN_WINDOW = 20
OPPONENT_RELIABLE_ACTION_COUNT = 50
OPPONENT_FAST_LEARNING_RATE = 0.1
OPPONENT_SLOW_LEARNING_RATE = 0.08
OPPONENT_TENDENCY_LEARNING_RATE = 0.05
OPPONENT_MIN_RELIABILITY = 0.3      # Below this, advice is withheld
OPPONENT_EXPORT_ACTION_LIMIT = 50
GOOD_CALL_POT_ODDS = 3.0            # Calling above these odds counts as odds-aware
BAD_CALL_POT_ODDS = 2.0             # Folding below these odds counts as odds-aware
