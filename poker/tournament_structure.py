"""
Tournament blind structure and chip denomination rules.

The blind table is static reference data built once at import. Every lookup
here is a pure function of the level number, so callers on any thread can
share it freely.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

logger = logging.getLogger(__name__)

Number = Union[int, float]

DEFAULT_MIN_BETTING_INCREMENT = 100
FALLBACK_CHIP_DENOMINATIONS = (100, 500, 1000, 5000)
LEVEL_DURATION_MINUTES = 60


@dataclass(frozen=True)
class ChipDenomination:
    value: int
    color: str
    code: str


CHIP_DENOMINATIONS: Dict[int, ChipDenomination] = {
    25: ChipDenomination(25, 'Green', 'T-25'),
    100: ChipDenomination(100, 'Black', 'T-100'),
    500: ChipDenomination(500, 'Purple', 'T-500'),
    1000: ChipDenomination(1000, 'Yellow', 'T-1000'),
    5000: ChipDenomination(5000, 'Orange', 'T-5000'),
    25000: ChipDenomination(25000, 'Pink', 'T-25000'),
    100000: ChipDenomination(100000, 'Gray', 'T-100000'),
    500000: ChipDenomination(500000, 'Brown', 'T-500000'),
}


@dataclass(frozen=True)
class BlindLevel:
    """One row of the tournament blind schedule."""
    level: int
    small_blind: int
    big_blind: int
    ante: int
    duration: int
    chip_denominations: Tuple[int, ...]
    min_betting_increment: int

    def to_dict(self) -> Dict:
        return {
            'level': self.level,
            'small_blind': self.small_blind,
            'big_blind': self.big_blind,
            'ante': self.ante,
            'duration': self.duration,
            'chip_denominations': list(self.chip_denominations),
            'min_betting_increment': self.min_betting_increment,
        }


_EARLY_CHIPS = (25, 100, 500, 1000)
_EARLY_MID_CHIPS = (100, 500, 1000, 5000)
_MID_CHIPS = (500, 1000, 5000, 25000)
_MID_LATE_CHIPS = (1000, 5000, 25000, 100000)
_LATE_CHIPS = (5000, 25000, 100000, 500000)

# (small blind, big blind, ante, denominations, minimum increment)
_SCHEDULE = (
    (100, 200, 200, _EARLY_CHIPS, 25),
    (50, 100, 0, _EARLY_CHIPS, 25),
    (75, 150, 0, _EARLY_CHIPS, 25),
    (100, 200, 0, _EARLY_CHIPS, 25),
    (150, 300, 0, _EARLY_CHIPS, 25),
    (200, 400, 0, _EARLY_MID_CHIPS, 100),
    (250, 500, 0, _EARLY_MID_CHIPS, 100),
    (300, 600, 75, _EARLY_MID_CHIPS, 100),
    (400, 800, 100, _EARLY_MID_CHIPS, 100),
    (500, 1000, 100, _EARLY_MID_CHIPS, 100),
    (600, 1200, 200, _MID_CHIPS, 100),
    (800, 1600, 200, _MID_CHIPS, 100),
    (1000, 2000, 300, _MID_CHIPS, 500),
    (1200, 2400, 400, _MID_CHIPS, 500),
    (1500, 3000, 500, _MID_CHIPS, 500),
    (2000, 4000, 500, _MID_LATE_CHIPS, 1000),
    (2500, 5000, 1000, _MID_LATE_CHIPS, 1000),
    (3000, 6000, 1000, _MID_LATE_CHIPS, 1000),
    (4000, 8000, 1000, _MID_LATE_CHIPS, 1000),
    (5000, 10000, 2000, _MID_LATE_CHIPS, 1000),
    (6000, 12000, 2000, _LATE_CHIPS, 5000),
    (8000, 16000, 2000, _LATE_CHIPS, 5000),
    (10000, 20000, 3000, _LATE_CHIPS, 5000),
    (12000, 24000, 4000, _LATE_CHIPS, 5000),
    (15000, 30000, 5000, _LATE_CHIPS, 5000),
)

TOURNAMENT_BLIND_LEVELS: Tuple[BlindLevel, ...] = tuple(
    BlindLevel(
        level=index,
        small_blind=sb,
        big_blind=bb,
        ante=ante,
        duration=LEVEL_DURATION_MINUTES,
        chip_denominations=chips,
        min_betting_increment=increment,
    )
    for index, (sb, bb, ante, chips, increment) in enumerate(_SCHEDULE, start=1)
)

_LEVELS_BY_NUMBER: Dict[int, BlindLevel] = {bl.level: bl for bl in TOURNAMENT_BLIND_LEVELS}
MAX_LEVEL = TOURNAMENT_BLIND_LEVELS[-1].level


@dataclass(frozen=True)
class TournamentPhase:
    name: str
    levels: Tuple[int, int]
    description: str

    def contains(self, level: int) -> bool:
        return self.levels[0] <= level <= self.levels[1]


TOURNAMENT_PHASES: Tuple[TournamentPhase, ...] = (
    TournamentPhase('EARLY', (1, 5), 'Early stage - deep stacks, speculative hands playable'),
    TournamentPhase('EARLY_MID', (6, 10), 'Antes begin - steal attempts become profitable'),
    TournamentPhase('MID', (11, 15), 'Middle stage - stacks shrink relative to blinds'),
    TournamentPhase('MID_LATE', (16, 20), 'Approaching the bubble - stack preservation matters'),
    TournamentPhase('LATE', (21, 25), 'Late stage - push/fold territory for short stacks'),
    TournamentPhase('FINAL_TABLE', (26, 30), 'Final table - pay jumps drive every decision'),
)
_PHASES_BY_NAME = {phase.name: phase for phase in TOURNAMENT_PHASES}
DEFAULT_PHASE = 'LATE'


def get_blind_level(level: int) -> Optional[BlindLevel]:
    """Blind level for a level number, or None when it is outside the table."""
    return _LEVELS_BY_NUMBER.get(level)


def get_next_blind_level(level: int) -> Optional[BlindLevel]:
    return get_blind_level(level + 1)


def get_active_chip_denominations(level: int) -> Tuple[int, ...]:
    blind_level = get_blind_level(level)
    if blind_level is None:
        return FALLBACK_CHIP_DENOMINATIONS
    return blind_level.chip_denominations


def get_min_betting_increment(level: int) -> int:
    blind_level = get_blind_level(level)
    if blind_level is None:
        return DEFAULT_MIN_BETTING_INCREMENT
    return blind_level.min_betting_increment


def _round_half_away_from_zero(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def round_to_chip_increment(amount: Number, level: int) -> int:
    """
    Round a bet to the nearest amount payable with the level's chips.

    Halves round away from zero. Rounding an already rounded amount returns
    it unchanged.
    """
    increment = get_min_betting_increment(level)
    if isinstance(amount, int):
        # Exact integer arithmetic; avoids float drift on large stacks
        quotient, remainder = divmod(abs(amount), increment)
        if remainder * 2 >= increment:
            quotient += 1
        rounded = quotient * increment
        return rounded if amount >= 0 else -rounded
    return _round_half_away_from_zero(amount / increment) * increment


def validate_chip_amount(amount: Number, level: int) -> bool:
    """True when the amount is an exact multiple of the level's increment."""
    return amount % get_min_betting_increment(level) == 0


def get_tournament_phase(level: int) -> str:
    """Name of the tournament phase for a level; beyond the table it is LATE."""
    if get_blind_level(level) is None:
        return DEFAULT_PHASE
    for phase in TOURNAMENT_PHASES:
        if phase.contains(level):
            return phase.name
    return DEFAULT_PHASE


def get_phase_description(phase_name: str) -> str:
    phase = _PHASES_BY_NAME.get(phase_name)
    return phase.description if phase else ''


@dataclass(frozen=True)
class ChipRaceOff:
    """Chips retired when moving into a level."""
    level: int
    removed_chips: Tuple[int, ...]
    new_min_increment: int
    description: str


def get_chip_race_off_info(level: int) -> Optional[ChipRaceOff]:
    """
    Compare the denominations of `level` with the previous level. Returns the
    race-off event if any denomination was retired, otherwise None.
    """
    current = get_blind_level(level)
    previous = get_blind_level(level - 1)
    if current is None or previous is None:
        return None

    removed = tuple(chip for chip in previous.chip_denominations
                    if chip not in current.chip_denominations)
    if not removed:
        return None

    codes = ', '.join(CHIP_DENOMINATIONS[chip].code if chip in CHIP_DENOMINATIONS else str(chip)
                      for chip in removed)
    race_off = ChipRaceOff(
        level=level,
        removed_chips=removed,
        new_min_increment=current.min_betting_increment,
        description=f"Chip race-off: {codes} chips removed",
    )
    logger.debug(f"Level {level} chip race-off: {race_off.removed_chips}")
    return race_off
