"""
Pure functions that move a GameState through a hand of no-limit hold'em.

Every function takes a GameState and returns a new one; nothing is mutated.
Player actions are checked by the action legality rules before they are
applied, and an illegal action raises ActionRejected with the validation
result attached.
"""

import logging
import random
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from core.deck import burn_card, create_deck, deal_cards
from .betting_context import validate_player_action
from .errors import ActionRejected, StructuralError
from .game_state import (
    ALL_IN, CALL, CHECK, COMMUNITY_CARDS_BY_ROUND, DEFAULT_SETTINGS, FLOP, FOLD, GAME_OVER,
    MAX_PLAYERS, MAX_SEAT, PLAYING, PREFLOP, RAISE, RIVER, SETUP, TURN,
    GameState, HandResult, LastAction, Player, PotAward, SidePot,
)
from .hand_evaluator import HandEvaluator
from .personality import PERSONALITY_PROFILES, RANDOM_PERSONALITY, get_profile_key
from .tournament_structure import get_blind_level, get_chip_race_off_info

logger = logging.getLogger(__name__)

HUMAN_PLAYER_ID = 'human'
NEXT_ROUND = {PREFLOP: FLOP, FLOP: TURN, TURN: RIVER}

AIPlayerInfo = Union[Tuple[str, str], Mapping[str, Any]]


##################################################################
# Game setup
##################################################################

def _ai_player_fields(info: AIPlayerInfo) -> Tuple[str, str]:
    if isinstance(info, Mapping):
        return info.get('name'), info.get('personality', RANDOM_PERSONALITY)
    name, personality = info
    return name, personality


def initialize_game(human_name: Optional[str], ai_players: Sequence[AIPlayerInfo],
                    rng: Optional[random.Random] = None,
                    settings: Optional[Mapping[str, Any]] = None) -> GameState:
    """
    Seat a new table and return the state before the first hand is dealt.

    :param human_name: (str)
        Name of the human player, or None for a table of computer players only.
    :param ai_players: (Sequence)
        (name, personality) pairs or dicts with 'name' and 'personality'. A
        personality of 'RANDOM' is resolved to a named profile with the rng.
    :param rng: (random.Random)
        Source of all randomness: seat order, dealer button and personalities.
    :param settings: (Mapping)
        Overrides for DEFAULT_SETTINGS ('initial_chips', 'small_blind', 'big_blind').
    :return: (GameState)
        A state in the setup phase with every player seated and funded.
    :raises StructuralError:
        If the player list is empty, too large, or a player has no name.
    """
    rng = rng or random.Random()
    settings = {**DEFAULT_SETTINGS, **(settings or {})}

    entrants: List[Dict[str, Any]] = []
    if human_name is not None:
        if not str(human_name).strip():
            raise StructuralError('Human player needs a name')
        entrants.append({'id': HUMAN_PLAYER_ID, 'name': human_name, 'is_human': True, 'personality': None})

    for index, info in enumerate(ai_players):
        name, personality = _ai_player_fields(info)
        if not name:
            raise StructuralError(f"AI player {index} needs a name")
        if personality == RANDOM_PERSONALITY:
            personality = rng.choice(sorted(PERSONALITY_PROFILES))
        elif get_profile_key(personality) is None:
            raise StructuralError(f"Unknown personality for {name}: {personality}")
        entrants.append({'id': f"ai_{index + 1}", 'name': name, 'is_human': False, 'personality': personality})

    if len(entrants) < 2:
        raise StructuralError('A game needs at least 2 players')
    if len(entrants) > MAX_PLAYERS:
        raise StructuralError(f"A game cannot have more than {MAX_PLAYERS} players")

    seats = rng.sample(range(MAX_SEAT + 1), len(entrants))
    players = sorted(
        (Player(id=e['id'], name=e['name'], seat=seat, chips=settings['initial_chips'],
                is_human=e['is_human'], personality=e['personality'])
         for e, seat in zip(entrants, seats)),
        key=lambda p: p.seat,
    )

    state = GameState(
        players=tuple(players),
        phase=SETUP,
        small_blind=settings['small_blind'],
        big_blind=settings['big_blind'],
        dealer_button=rng.randrange(len(players)),
    )
    logger.info(f"Seated {len(players)} players, dealer button at {players[state.dealer_button].name}")
    return state


def set_blind_level(game_state: GameState, level: int, use_antes: bool = False) -> GameState:
    """Move the table to a tournament level, taking blinds (and optionally the ante) from the schedule."""
    blind_level = get_blind_level(level)
    if blind_level is None:
        logger.warning(f"No blind level {level}; keeping level {game_state.tournament_level}")
        return game_state
    race_off = get_chip_race_off_info(level)
    if race_off is not None:
        logger.info(race_off.description)
    logger.info(f"Blinds up: level {level} ({blind_level.small_blind}/{blind_level.big_blind})")
    return game_state.update(tournament_level=level,
                             small_blind=blind_level.small_blind,
                             big_blind=blind_level.big_blind,
                             ante=blind_level.ante if use_antes else 0)


##################################################################
# Seat navigation
##################################################################

def get_next_active_player(players: Sequence[Player], current_index: int) -> int:
    """
    Index of the next player clockwise who can still act (in the hand, not all-in).

    :return: (int)
        The player index, or -1 when nobody else can act.
    """
    player_count = len(players)
    for offset in range(1, player_count + 1):
        index = (current_index + offset) % player_count
        if index == current_index:
            break
        if players[index].can_act:
            return index
    return -1


def get_first_to_act_post_flop(players: Sequence[Player], dealer_button: int) -> int:
    """First player left of the button who can act, or -1."""
    player_count = len(players)
    for offset in range(1, player_count + 1):
        index = (dealer_button + offset) % player_count
        if players[index].can_act:
            return index
    return -1


def _next_in_hand(players: Sequence[Player], index: int) -> int:
    """Next seat clockwise dealt into the hand, whether or not they can still act."""
    player_count = len(players)
    for offset in range(1, player_count + 1):
        candidate = (index + offset) % player_count
        if players[candidate].is_active:
            return candidate
    return index


def _next_funded(players: Sequence[Player], index: int) -> int:
    player_count = len(players)
    for offset in range(1, player_count + 1):
        candidate = (index + offset) % player_count
        if players[candidate].chips > 0:
            return candidate
    return index


def is_betting_round_complete(players: Sequence[Player], current_bet: int) -> bool:
    """
    A round is complete once every player who can still act has acted and
    matched the table bet. With nobody able to act it is trivially complete.
    """
    able = [p for p in players if p.can_act]
    if not able:
        return True
    return all(p.has_acted and p.current_bet == current_bet for p in able)


##################################################################
# Hand start
##################################################################

def _post_bet(game_state: GameState, player_idx: int, amount: int) -> Tuple[GameState, int]:
    """Move up to amount from a player's stack into the pot. Returns the chips actually paid."""
    player = game_state.players[player_idx]
    paid = min(amount, player.chips)
    game_state = game_state.update_player(
        player_idx,
        chips=player.chips - paid,
        current_bet=player.current_bet + paid,
        total_contribution=player.total_contribution + paid,
        is_all_in=player.chips - paid == 0,
    )
    return game_state.update(pot=game_state.pot + paid), paid


def start_new_hand(game_state: GameState, rng: Optional[random.Random] = None) -> GameState:
    """
    Shuffle, deal and post blinds for the next hand.

    Only players with chips are dealt in. One card is burned before the hole
    cards. The small blind sits left of the button and the big blind left of
    that (heads-up the button posts the small blind). The first player to act
    is the next one after the big blind.
    """
    rng = rng or random.Random()

    funded = [p for p in game_state.players if p.chips > 0]
    if len(funded) < 2:
        logger.info('Fewer than 2 players with chips; game over')
        return game_state.update(phase=GAME_OVER, hand_complete=True)

    players = tuple(
        p.update(is_active=p.chips > 0, hole_cards=(), current_bet=0, total_contribution=0,
                 has_acted=False, is_all_in=False)
        for p in game_state.players
    )
    dealer_button = game_state.dealer_button
    if players[dealer_button].chips == 0:
        dealer_button = _next_funded(players, dealer_button)

    deck = create_deck(rng)
    burned, deck = burn_card(deck)
    dealt_players = []
    for player in players:
        if player.is_active:
            hole_cards, deck = deal_cards(deck, 2)
            player = player.update(hole_cards=hole_cards)
        dealt_players.append(player)

    game_state = game_state.update(
        players=tuple(dealt_players),
        phase=PLAYING,
        deck=deck,
        community_cards=(),
        burn_cards=(burned,),
        pot=0,
        side_pots=(),
        current_bet=0,
        last_raise_size=game_state.big_blind,
        dealer_button=dealer_button,
        betting_round=PREFLOP,
        action_count=0,
        last_action=None,
        hand_complete=False,
        last_hand_result=None,
    )

    if game_state.ante > 0:
        for index, player in enumerate(game_state.players):
            if player.is_active:
                game_state, _ = _post_bet(game_state, index, game_state.ante)
        # Antes are dead money, not part of the bet to match
        game_state = game_state.update(players=tuple(p.update(current_bet=0) for p in game_state.players))

    if len(funded) == 2:
        small_blind_idx = dealer_button
    else:
        small_blind_idx = _next_in_hand(game_state.players, dealer_button)
    big_blind_idx = _next_in_hand(game_state.players, small_blind_idx)

    game_state, _ = _post_bet(game_state, small_blind_idx, game_state.small_blind)
    game_state, _ = _post_bet(game_state, big_blind_idx, game_state.big_blind)
    game_state = game_state.update(current_bet=max(p.current_bet for p in game_state.players))

    first_to_act = get_next_active_player(game_state.players, big_blind_idx)
    if first_to_act == -1 and game_state.players[big_blind_idx].can_act:
        first_to_act = big_blind_idx
    game_state = game_state.update(active_player=first_to_act if first_to_act != -1 else big_blind_idx)

    logger.debug(f"Hand {game_state.hand_number}: button={dealer_button} sb={small_blind_idx} "
                 f"bb={big_blind_idx} first={game_state.active_player}")

    return _settle(game_state)


##################################################################
# Player actions
##################################################################

def apply_action(game_state: GameState, action: str, amount: int = 0) -> GameState:
    """
    Apply the active player's action and move the turn to the next player.

    Raise amounts are totals ("raise TO"). A full raise resets the other
    players' has_acted flags and becomes the new minimum raise increment; an
    all-in for less than a full raise re-opens nothing.

    :raises ActionRejected:
        If the action is not legal for the active player.
    """
    player_idx = game_state.active_player
    player = game_state.players[player_idx]

    result = validate_player_action(action, amount, player, game_state)
    if not result.is_valid:
        logger.warning(f"Rejected {action} ({amount}) from {player.name}: {result.errors}")
        raise ActionRejected(action, amount, result)

    previous_bet = game_state.current_bet
    paid = 0

    if action == FOLD:
        game_state = game_state.update_player(player_idx, is_active=False)
    elif action == CHECK:
        pass
    elif action == CALL:
        game_state, paid = _post_bet(game_state, player_idx, previous_bet - player.current_bet)
    elif action == RAISE:
        game_state, paid = _post_bet(game_state, player_idx, amount - player.current_bet)
    elif action == ALL_IN:
        game_state, paid = _post_bet(game_state, player_idx, player.chips)

    new_bet = game_state.players[player_idx].current_bet
    if new_bet > previous_bet:
        raise_size = new_bet - previous_bet
        is_full_raise = raise_size >= max(game_state.last_raise_size, game_state.big_blind)
        game_state = game_state.update(current_bet=new_bet)
        if is_full_raise:
            game_state = game_state.update(last_raise_size=raise_size)
            game_state = _reset_action_flags(game_state, exclude=player_idx)
        logger.debug(f"{player.name} raised to {new_bet} ({'full' if is_full_raise else 'incomplete'} raise)")

    game_state = game_state.update_player(player_idx, has_acted=True)
    game_state = game_state.update(
        last_action=LastAction(player.id, action, paid),
        action_count=game_state.action_count + 1,
    )

    next_player = get_next_active_player(game_state.players, player_idx)
    if next_player != -1:
        game_state = game_state.update(active_player=next_player)
    return game_state


def _reset_action_flags(game_state: GameState, exclude: int) -> GameState:
    players = tuple(p if i == exclude or not p.can_act else p.update(has_acted=False)
                    for i, p in enumerate(game_state.players))
    return game_state.update(players=players)


def play_turn(game_state: GameState, action: str, amount: int = 0) -> GameState:
    """Apply an action, then deal, run out or settle the hand as the betting allows."""
    game_state = apply_action(game_state, action, amount)
    return _settle(game_state)


def _settle(game_state: GameState) -> GameState:
    live = [i for i, p in enumerate(game_state.players) if p.is_active]
    if len(live) == 1:
        return end_hand_early(game_state, live[0])
    if not is_betting_round_complete(game_state.players, game_state.current_bet):
        return game_state
    if len([p for p in game_state.players if p.can_act]) <= 1:
        return run_out_board(game_state)
    return advance_betting_round(game_state)


##################################################################
# Betting rounds
##################################################################

def _deal_street(game_state: GameState, next_round: str) -> GameState:
    burned, deck = burn_card(game_state.deck)
    count = COMMUNITY_CARDS_BY_ROUND[next_round] - len(game_state.community_cards)
    cards, deck = deal_cards(deck, count)
    return game_state.update(
        deck=deck,
        burn_cards=game_state.burn_cards + (burned,),
        community_cards=game_state.community_cards + cards,
        betting_round=next_round,
    )


def advance_betting_round(game_state: GameState) -> GameState:
    """
    Close the current betting round. After the river this goes to showdown;
    otherwise burn one, deal the next street, clear bets and hand the action
    to the first player left of the button.
    """
    if game_state.betting_round == RIVER:
        return showdown(game_state)

    game_state = _deal_street(game_state, NEXT_ROUND[game_state.betting_round])
    players = tuple(p.update(current_bet=0, has_acted=False) for p in game_state.players)
    first = get_first_to_act_post_flop(players, game_state.dealer_button)
    game_state = game_state.update(
        players=players,
        current_bet=0,
        last_raise_size=game_state.big_blind,
        action_count=0,
        active_player=first if first != -1 else game_state.active_player,
    )
    logger.debug(f"Dealt {game_state.betting_round}: {[str(c) for c in game_state.community_cards]}")
    return game_state


def run_out_board(game_state: GameState) -> GameState:
    """Deal the remaining streets with no further betting, then show down."""
    while game_state.betting_round != RIVER:
        game_state = _deal_street(game_state, NEXT_ROUND[game_state.betting_round])
    players = tuple(p.update(current_bet=0) for p in game_state.players)
    game_state = game_state.update(players=players, current_bet=0)
    logger.debug(f"Ran out the board: {[str(c) for c in game_state.community_cards]}")
    return showdown(game_state)


##################################################################
# Pots and showdown
##################################################################

def calculate_side_pots(players: Sequence[Player]) -> Tuple[SidePot, ...]:
    """
    Split everything contributed this hand into a main pot and side pots.

    Each distinct contribution level of a player still in the hand closes a
    pot that every live player who reached that level is eligible for.
    Chips from folded players count toward the pots they reached, but folded
    players are never eligible. Adjacent pots with the same eligible players
    are merged.
    """
    contributions = [p.total_contribution for p in players if p.total_contribution > 0]
    live = [p for p in players if p.is_active]
    levels = sorted({p.total_contribution for p in live if p.total_contribution > 0})

    pots: List[SidePot] = []
    previous = 0
    for level in levels:
        amount = sum(min(c, level) - min(c, previous) for c in contributions)
        eligible = tuple(p.id for p in live if p.total_contribution >= level)
        if amount > 0:
            if pots and pots[-1].eligible_players == eligible:
                pots[-1] = SidePot(pots[-1].amount + amount, eligible)
            else:
                pots.append(SidePot(amount, eligible))
        previous = level

    leftover = sum(c - min(c, previous) for c in contributions)
    if leftover:
        if pots:
            pots[-1] = SidePot(pots[-1].amount + leftover, pots[-1].eligible_players)
        else:
            pots.append(SidePot(leftover, tuple(p.id for p in live)))
    return tuple(pots)


def _clockwise_from_button(game_state: GameState, player_ids: Sequence[Any]) -> List[Any]:
    """Order player ids by seat, starting left of the button."""
    count = len(game_state.players)
    order = [game_state.players[(game_state.dealer_button + offset) % count].id for offset in range(1, count + 1)]
    return [pid for pid in order if pid in player_ids]


def _complete_hand(game_state: GameState, result: HandResult, winnings: Dict[Any, int],
                   winner_idx: int) -> GameState:
    players = tuple(p.update(chips=p.chips + winnings.get(p.id, 0), current_bet=0)
                    for p in game_state.players)
    return game_state.update(
        players=players,
        pot=0,
        current_bet=0,
        active_player=winner_idx,
        hand_complete=True,
        last_hand_result=result,
    )


def showdown(game_state: GameState) -> GameState:
    """
    Award every pot to the best hand among its eligible players.

    Tied players split a pot evenly; odd chips go to the first tied player
    clockwise from the button.
    """
    live = [(i, p) for i, p in enumerate(game_state.players) if p.is_active]
    if len(live) == 1:
        return end_hand_early(game_state, live[0][0])

    evaluations = {p.id: HandEvaluator(p.hole_cards, game_state.community_cards).evaluate()
                   for _, p in live}
    pots = calculate_side_pots(game_state.players)

    winnings: Dict[Any, int] = {}
    awards = []
    for pot in pots:
        contenders = [pid for pid in pot.eligible_players if pid in evaluations]
        if not contenders:
            continue
        best = max(evaluations[pid].strength for pid in contenders)
        winners = _clockwise_from_button(
            game_state, [pid for pid in contenders if evaluations[pid].strength == best])
        share, remainder = divmod(pot.amount, len(winners))
        for pid in winners:
            winnings[pid] = winnings.get(pid, 0) + share
        winnings[winners[0]] += remainder
        awards.append(PotAward(pot.amount, tuple(winners), evaluations[winners[0]].description))
        logger.debug(f"Pot of {pot.amount} to {winners} with {evaluations[winners[0]].description}")

    result = HandResult(
        hand_number=game_state.hand_number,
        end_type='showdown',
        total_pot=game_state.pot,
        awards=tuple(awards),
        winnings=tuple(winnings.items()),
    )
    first_winner = awards[0].winner_ids[0] if awards else live[0][1].id
    _, winner_idx = game_state.get_player_by_id(first_winner)
    return _complete_hand(game_state.update(side_pots=pots), result, winnings, winner_idx)


def end_hand_early(game_state: GameState, winner_idx: int) -> GameState:
    """Everyone else folded: the remaining player takes the whole pot unseen."""
    winner = game_state.players[winner_idx]
    result = HandResult(
        hand_number=game_state.hand_number,
        end_type='fold',
        total_pot=game_state.pot,
        awards=(PotAward(game_state.pot, (winner.id,), 'Uncontested'),),
        winnings=((winner.id, game_state.pot),),
    )
    logger.debug(f"{winner.name} wins {game_state.pot} uncontested")
    return _complete_hand(game_state, result, {winner.id: game_state.pot}, winner_idx)


def advance_button(game_state: GameState) -> GameState:
    """Pass the button to the next player with chips and bump the hand number."""
    return game_state.update(
        dealer_button=_next_funded(game_state.players, game_state.dealer_button),
        hand_number=game_state.hand_number + 1,
    )


def next_hand(game_state: GameState, rng: Optional[random.Random] = None) -> GameState:
    """Move the button and deal the following hand (or end the game)."""
    return start_new_hand(advance_button(game_state), rng)
