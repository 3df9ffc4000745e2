"""
Four-dimensional personality model for AI players.

A PersonalityProfile places a player on four 0-1 axes:

    tightness       how selective the starting hand range is
    aggression      preference for betting and raising over calling
    adaptability    how much position and table context shift decisions
    risk_tolerance  appetite for variance (short-stack shoves, bluffs)

Profiles are frozen values. Changing a player's personality means building a
new profile (see PersonalityProfile.update) and swapping it in whole, so a
reader never sees a half-updated profile. BehaviorThresholds is derived from a
profile by a pure function and is recomputed rather than stored.
"""

import random
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from .tournament_structure import get_tournament_phase

TRAIT_NAMES = ('tightness', 'aggression', 'adaptability', 'risk_tolerance')
RANDOM_PERSONALITY = 'RANDOM'


def _clamp(value: float, min_val: float = 0.0, max_val: float = 1.0) -> float:
    """Clamp value to range [min_val, max_val]."""
    return max(min_val, min(max_val, value))


@dataclass(frozen=True)
class PersonalityProfile:
    tightness: float
    aggression: float
    adaptability: float
    risk_tolerance: float
    name: str = 'Custom'
    description: str = ''

    def __post_init__(self):
        for trait in TRAIT_NAMES:
            object.__setattr__(self, trait, _clamp(float(getattr(self, trait))))

    def update(self, **kwargs) -> 'PersonalityProfile':
        return replace(self, **kwargs)

    @property
    def thresholds(self) -> 'BehaviorThresholds':
        return calculate_behavior_thresholds(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'description': self.description,
            **{trait: getattr(self, trait) for trait in TRAIT_NAMES},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'PersonalityProfile':
        return cls(
            tightness=data.get('tightness', 0.5),
            aggression=data.get('aggression', 0.5),
            adaptability=data.get('adaptability', 0.5),
            risk_tolerance=data.get('risk_tolerance', 0.5),
            name=data.get('name', 'Custom'),
            description=data.get('description', ''),
        )


@dataclass(frozen=True)
class BehaviorThresholds:
    hand_selection_threshold: float
    raise_frequency: float
    bluff_frequency: float
    fold_threshold: float
    adaptability_factor: float
    position_sensitivity: float
    variance_tolerance: float
    betting_size_multiplier: float


def calculate_behavior_thresholds(profile: PersonalityProfile) -> BehaviorThresholds:
    """Convert the four personality axes into actionable frequencies and multipliers."""
    return BehaviorThresholds(
        hand_selection_threshold=0.15 + profile.tightness * 0.4,           # 0.15-0.55
        raise_frequency=0.2 + profile.aggression * 0.6,                    # 0.2-0.8
        bluff_frequency=profile.aggression * 0.25 + profile.risk_tolerance * 0.20,  # 0.0-0.45
        fold_threshold=0.25 + profile.tightness * 0.35,                    # 0.25-0.6
        adaptability_factor=0.5 + profile.adaptability * 0.5,              # 0.5-1.0
        position_sensitivity=profile.adaptability * 0.3,
        variance_tolerance=profile.risk_tolerance,
        betting_size_multiplier=0.5 + profile.aggression * 0.5,            # 0.5-1.0x pot
    )


def _profile(name, tightness, aggression, adaptability, risk_tolerance, description):
    return PersonalityProfile(tightness, aggression, adaptability, risk_tolerance,
                              name=name, description=description)


PERSONALITY_PROFILES: Dict[str, PersonalityProfile] = {
    'NITS': _profile('Nit', 0.9, 0.2, 0.1, 0.1,
                     'Extremely tight-passive player who only plays premium hands'),
    'ROCK': _profile('Rock', 0.8, 0.4, 0.2, 0.3,
                     'Solid, tight-aggressive player who plays ABC poker'),
    'TAG': _profile('TAG (Tight-Aggressive)', 0.7, 0.8, 0.6, 0.5,
                    'Classic tight-aggressive player with good fundamentals'),
    'LAG': _profile('LAG (Loose-Aggressive)', 0.3, 0.9, 0.8, 0.8,
                    'Loose-aggressive player who applies constant pressure'),
    'CALLING_STATION': _profile('Calling Station', 0.2, 0.1, 0.1, 0.6,
                                'Loose-passive player who calls too much and rarely folds'),
    'MANIAC': _profile('Maniac', 0.1, 0.95, 0.3, 0.95,
                       'Extremely loose-aggressive player who plays almost every hand aggressively'),
    'FISH': _profile('Fish', 0.4, 0.3, 0.1, 0.7,
                     'Recreational player with poor fundamentals and high variance'),
    'SHARK': _profile('Shark', 0.6, 0.7, 0.9, 0.4,
                      'Highly skilled player who adapts to opponents and situations'),
    'PROFESSOR': _profile('Professor', 0.8, 0.5, 0.8, 0.2,
                          'Mathematical player who makes calculated decisions based on odds'),
    'GAMBLER': _profile('Gambler', 0.3, 0.6, 0.4, 0.9,
                        'Action-seeking player who loves big pots and high variance'),
}

# Strategy tags from older saved games, mapped onto the four-axis profiles
LEGACY_STRATEGY_MAPPING: Dict[str, str] = {
    'aggressive': 'LAG',
    'tight': 'ROCK',
    'mathematical': 'PROFESSOR',
    'random': 'FISH',
    'positional': 'TAG',
    'balanced': 'SHARK',
    'randomly-determined': 'FISH',
}


def generate_random_profile(rng: Optional[random.Random] = None) -> PersonalityProfile:
    rng = rng or random.Random()
    return PersonalityProfile(
        tightness=rng.random(),
        aggression=rng.random(),
        adaptability=rng.random(),
        risk_tolerance=rng.random(),
        name='Random',
        description='Randomly generated personality',
    )


def get_profile_key(tag: Any) -> Optional[str]:
    """Profile table key for a profile name or a legacy strategy tag."""
    if not isinstance(tag, str):
        return None
    if tag in PERSONALITY_PROFILES:
        return tag
    if tag.upper() in PERSONALITY_PROFILES:
        return tag.upper()
    return LEGACY_STRATEGY_MAPPING.get(tag.lower())


def resolve_profile(tag: str, rng: Optional[random.Random] = None) -> PersonalityProfile:
    """
    Look up a personality by profile key ('SHARK'), legacy strategy tag
    ('balanced') or 'RANDOM', which picks one of the named profiles.

    :raises KeyError: when the tag is not recognised
    """
    if tag == RANDOM_PERSONALITY:
        rng = rng or random.Random()
        return PERSONALITY_PROFILES[rng.choice(sorted(PERSONALITY_PROFILES))]
    key = get_profile_key(tag)
    if key is None:
        raise KeyError(f"Unknown personality: {tag}")
    return PERSONALITY_PROFILES[key]


def _band(value: float, labels: Tuple[str, str, str, str]) -> str:
    if value > 0.7:
        return labels[0]
    if value > 0.5:
        return labels[1]
    if value > 0.3:
        return labels[2]
    return labels[3]


def describe_personality(profile: PersonalityProfile, player_name: str = 'AI') -> str:
    """Plain-language description of a profile, suitable for a player card or prompt."""
    tightness = _band(profile.tightness, ('very tight', 'somewhat tight', 'somewhat loose', 'very loose'))
    aggression = _band(profile.aggression,
                       ('very aggressive', 'somewhat aggressive', 'somewhat passive', 'very passive'))
    adaptability = _band(profile.adaptability,
                         ('highly adaptable', 'somewhat adaptable', 'somewhat consistent', 'very consistent'))
    risk = _band(profile.risk_tolerance,
                 ('loves high variance plays', 'comfortable with moderate risk',
                  'prefers low risk', 'very risk averse'))

    hands = 'few' if profile.tightness > 0.6 else 'moderate' if profile.tightness > 0.4 else 'many'
    betting = ('frequently bet and raise' if profile.aggression > 0.6
               else 'bet moderately' if profile.aggression > 0.4
               else 'prefer to call and check')
    decisions = ('adjust your strategy based on opponents' if profile.adaptability > 0.6
                 else 'stick to consistent patterns')
    variance = ('embrace high variance situations' if profile.risk_tolerance > 0.6
                else 'prefer predictable outcomes')

    return (
        f"You are {player_name}, a poker player with the following characteristics:\n"
        f"- Playing Style: {tightness} and {aggression}\n"
        f"- Adaptability: {adaptability} in response to opponents and situations\n"
        f"- Risk Tolerance: {risk}\n"
        f"- Hand Selection: You play {hands} hands\n"
        f"- Betting Style: You {betting}\n"
        f"- Decision Making: You {decisions}\n"
        f"- Variance: You {variance}"
    )


@dataclass(frozen=True)
class TournamentStrategy:
    phase: str
    focus: str
    key_points: Tuple[str, ...]


TOURNAMENT_STRATEGY: Dict[str, TournamentStrategy] = {
    'EARLY': TournamentStrategy(
        'EARLY', 'Ultra-patient play',
        ('Extremely tight from early position - only premium hands (AA-JJ, AK)',
         'Play fit-or-fold poker with deep stacks',
         'Value bet thin, avoid big bluffs',
         'Keep pots small with marginal hands'),
    ),
    'EARLY_MID': TournamentStrategy(
        'EARLY_MID', 'Antes make stealing worthwhile',
        ('Open wider from late position',
         'Defend the big blind against late-position opens',
         'Start tracking which opponents fold too often'),
    ),
    'MID': TournamentStrategy(
        'MID', 'Accumulate chips without busting',
        ('Re-steal against frequent openers',
         'Avoid marginal calls off a medium stack',
         'Pressure short stacks who cannot afford to call'),
    ),
    'MID_LATE': TournamentStrategy(
        'MID_LATE', 'Stack preservation near the bubble',
        ('Tighten up calling ranges, keep opening ranges',
         'Big stacks should apply constant pressure',
         'Avoid confrontations with bigger stacks'),
    ),
    'LATE': TournamentStrategy(
        'LATE', 'Push/fold with short stacks',
        ('Under 10 big blinds, shove or fold',
         'Pick spots before the blinds eat the stack',
         'Call shoves with hands that dominate shoving ranges'),
    ),
}


def get_tournament_strategy(level: int) -> TournamentStrategy:
    """Strategy guidance for the tournament phase a level falls in."""
    return TOURNAMENT_STRATEGY.get(get_tournament_phase(level), TOURNAMENT_STRATEGY['LATE'])
