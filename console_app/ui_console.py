"""Rich console runner for a tournament table"""

import argparse
import logging
import random
from typing import Dict, List, Optional, Tuple

from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table
from rich.text import Text

from core.card import Card, format_card
from poker import config
from poker.ai_decision_engine import AIDecisionEngine
from poker.betting_context import BettingContext, get_position_name
from poker.context_adapter import GameContext
from poker.errors import ActionRejected, InvariantViolation
from poker.game_state import ALL_IN, CALL, CHECK, FOLD, GAME_OVER, RAISE, GameState
from poker.game_validator import validate_game_state
from poker.hand_flow import initialize_game, next_hand, play_turn, set_blind_level, start_new_hand
from poker.hand_log import HandLog
from poker.opponent_memory import ObservedAction, OpponentMemory
from poker.personality import describe_personality, get_tournament_strategy, resolve_profile
from poker.tournament_structure import MAX_LEVEL, get_phase_description, get_tournament_phase

logger = logging.getLogger(__name__)

DEFAULT_OPPONENTS = [
    ('Ada', 'SHARK'),
    ('Bo', 'MANIAC'),
    ('Cy', 'ROCK'),
    ('Dee', 'CALLING_STATION'),
    ('Eli', 'RANDOM'),
    ('Fay', 'RANDOM'),
]
HANDS_PER_LEVEL = 10
ACTION_KEYS = {'f': 'fold', 'x': 'check', 'c': 'call', 'r': 'raise', 'a': 'all-in'}


def render_card(card: Optional[Card], hidden: bool = False) -> Text:
    if hidden or card is None:
        return Text('??', style='bold cyan')
    return Text(format_card(card), style='bold red' if card.is_red else 'bold white')


def render_cards(cards, hidden: bool = False) -> Text:
    text = Text()
    for index, card in enumerate(cards):
        if index:
            text.append(' ')
        text.append_text(render_card(card, hidden))
    return text


def render_table(game_state: GameState, reveal: bool = False) -> Panel:
    """Players, stacks and bets with the board underneath."""
    table = Table(expand=True, show_edge=False)
    table.add_column('Seat', justify='right')
    table.add_column('Player')
    table.add_column('Position')
    table.add_column('Chips', justify='right')
    table.add_column('Bet', justify='right')
    table.add_column('Cards')

    for index, player in enumerate(game_state.players):
        style = 'dim' if not player.is_active else 'bold yellow' if index == game_state.active_player else ''
        status = ' (all-in)' if player.is_all_in else ' (out)' if player.chips == 0 and not player.is_active else ''
        show = reveal or player.is_human
        table.add_row(
            str(player.seat),
            f"{player.name}{status}",
            get_position_name(index, game_state.dealer_button, len(game_state.players)),
            f"{player.chips:,}",
            f"{player.current_bet:,}" if player.current_bet else '',
            render_cards(player.hole_cards, hidden=not show) if player.hole_cards else Text(''),
            style=style,
        )

    board = render_cards(game_state.community_cards) if game_state.community_cards else Text('(no cards)', style='dim')
    title = (f"Hand {game_state.hand_number} - Level {game_state.tournament_level} "
             f"({game_state.small_blind}/{game_state.big_blind}) - {game_state.betting_round}")
    return Panel(Columns([table, Text.assemble('Board: ', board, f"   Pot: {game_state.pot:,}")]),
                 title=title, border_style='green')


class TournamentRunner:
    """Plays a table to completion, computer players deciding through the AI engine."""

    def __init__(self, console: Console, rng: random.Random, human_name: Optional[str] = None,
                 opponents: Optional[List[Tuple[str, str]]] = None, hands_per_level: int = HANDS_PER_LEVEL,
                 use_antes: bool = False):
        self.console = console
        self.rng = rng
        self.hands_per_level = hands_per_level
        self.use_antes = use_antes
        self.hand_log = HandLog()
        self.memory = OpponentMemory()
        self.game_state = initialize_game(human_name, opponents or DEFAULT_OPPONENTS, rng,
                                          {'initial_chips': config.STARTING_CHIPS})
        self.game_state = set_blind_level(self.game_state, 1, use_antes)

        self.engines: Dict[str, AIDecisionEngine] = {}
        for player in self.game_state.players:
            self.memory.initialize_player(player.id, player.name)
            if not player.is_human:
                profile = resolve_profile(player.personality, rng)
                self.engines[player.id] = AIDecisionEngine(profile, rng)

    def introduce(self) -> None:
        for player in self.game_state.players:
            engine = self.engines.get(player.id)
            if engine is None:
                continue
            self.console.print(Panel(describe_personality(engine.profile, player.name),
                                     title=f"{player.name} - {engine.profile.name}", border_style='cyan'))

    def check_state(self, game_state: GameState, trigger: str) -> GameState:
        """Validate a freshly produced state; blocking errors stop the game."""
        result = validate_game_state(game_state)
        for warning in result.warnings:
            logger.debug(f"{trigger}: {warning}")
        try:
            result.raise_for_errors(f"Invalid state after {trigger}")
        except InvariantViolation as e:
            self.hand_log.log_error(e, trigger, game_state)
            raise
        self.hand_log.log_state_change(self.game_state, game_state, trigger)
        return game_state

    def run(self, max_hands: Optional[int] = None) -> GameState:
        self.introduce()
        state = self.check_state(start_new_hand(self.game_state, self.rng), 'start_hand')
        self.game_state = state
        hands_played = 0

        while self.game_state.phase != GAME_OVER:
            self.play_hand()
            hands_played += 1
            if max_hands is not None and hands_played >= max_hands:
                break

            state = self.game_state
            level = min(MAX_LEVEL, 1 + hands_played // self.hands_per_level)
            if level != state.tournament_level:
                state = set_blind_level(state, level, self.use_antes)
                strategy = get_tournament_strategy(level)
                self.console.print(f"[magenta]Level {level}: {get_phase_description(get_tournament_phase(level))} "
                                   f"({strategy.focus})[/]")
            self.game_state = self.check_state(next_hand(state, self.rng), 'next_hand')

        self.show_standings()
        return self.game_state

    def play_hand(self) -> None:
        while not self.game_state.hand_complete:
            state = self.game_state
            player = state.current_player
            if player.is_human:
                action, amount = self.ask_human(state)
            else:
                action, amount = self.ask_ai(state)

            try:
                new_state = play_turn(state, action, amount)
            except ActionRejected as e:
                self.hand_log.log_error(e, 'play_turn', state)
                if player.is_human:
                    self.console.print(f"[red]{e}[/]")
                    continue
                # Engine produced an illegal action
                logger.warning(f"Folding {player.name} after rejected action: {e}")
                action = FOLD if FOLD in BettingContext.from_game_state(state).available_actions else CHECK
                new_state = play_turn(state, action, 0)

            self.remember(state, action, amount)
            self.hand_log.log_player_action(player, action, amount, state)
            self.console.print(f"{player.name}: {action}{f' {amount:,}' if action == RAISE else ''}")
            self.game_state = self.check_state(new_state, action)

        self.show_result()

    def ask_ai(self, state: GameState) -> Tuple[str, int]:
        player = state.current_player
        engine = self.engines[player.id]
        context = GameContext.from_game_state(state)
        decision = engine.decide(context)
        self.hand_log.log_ai_reasoning(player, engine.profile.name, decision.to_dict(),
                                       decision.reasoning, state)
        return decision.action, decision.amount

    def ask_human(self, state: GameState) -> Tuple[str, int]:
        self.console.print(render_table(state))
        betting = BettingContext.from_game_state(state)
        options = {key: action for key, action in ACTION_KEYS.items() if action in betting.available_actions}
        prompt = ' | '.join(f"[{key}] {action}" for key, action in options.items())
        self.console.print(f"[cyan]To call: {betting.call_amount:,}   {prompt}[/]")

        choice = Prompt.ask('Your action', choices=list(options))
        action = options[choice]
        if action == RAISE:
            amount = IntPrompt.ask(f"Raise to ({betting.min_raise_to:,}-{betting.max_raise_to:,})",
                                   default=betting.min_raise_to)
            return action, amount
        if action == CALL:
            return action, betting.call_amount
        if action == ALL_IN:
            return action, betting.max_raise_to
        return action, 0

    def remember(self, state: GameState, action: str, amount: int) -> None:
        player = state.current_player
        betting = BettingContext.from_game_state(state)
        self.memory.record_action(player.id, ObservedAction(
            hand_number=state.hand_number,
            betting_round=state.betting_round,
            action=action,
            amount=amount,
            position=get_position_name(state.active_player, state.dealer_button, len(state.players)),
            pot_size=state.pot,
            stack_size=player.chips,
            opponents_in_hand=len(state.active_players) - 1,
            pot_odds=betting.pot_odds if betting.call_amount > 0 else None,
            was_raised=state.current_bet > state.big_blind,
        ))

    def show_result(self) -> None:
        state = self.game_state
        result = state.last_hand_result
        if result is None:
            return
        self.hand_log.log_hand_result(result, state)
        self.console.print(render_table(state, reveal=result.end_type == 'showdown'))
        winnings = dict(result.winnings)
        for player in state.players:
            if player.total_contribution or player.id in winnings:
                self.memory.record_hand_result(
                    player.id, result.hand_number, won=player.id in winnings,
                    showdown=result.end_type == 'showdown', pot_won=winnings.get(player.id, 0))
        self.memory.record_hand_completed()
        for award in result.awards:
            names = ', '.join(state.get_player_by_id(pid)[0].name for pid in award.winner_ids)
            self.console.print(f"[green]{names} win{'s' if len(award.winner_ids) == 1 else ''} "
                               f"{award.amount:,} ({award.hand_description})[/]")

    def show_standings(self) -> None:
        table = Table(title='Final standings')
        table.add_column('Player')
        table.add_column('Chips', justify='right')
        for player in sorted(self.game_state.players, key=lambda p: p.chips, reverse=True):
            table.add_row(player.name, f"{player.chips:,}")
        self.console.print(table)
        stats = self.hand_log.get_stats()
        self.console.print(f"[dim]{stats['total_logs']} log entries, "
                           f"{self.memory.total_hands} hands remembered[/]")


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description='Play a no-limit hold\'em tournament in the console')
    parser.add_argument('--human', metavar='NAME', help='take a seat at the table')
    parser.add_argument('--hands', type=int, default=None, help='stop after this many hands')
    parser.add_argument('--antes', action='store_true', help='play the schedule\'s antes')
    parser.add_argument('--seed', type=int, default=config.RANDOM_SEED, help='random seed')
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    console = Console()
    runner = TournamentRunner(console, random.Random(args.seed), human_name=args.human, use_antes=args.antes)
    try:
        runner.run(max_hands=args.hands)
    except KeyboardInterrupt:
        console.print('\n[yellow]Game interrupted.[/]')


if __name__ == '__main__':
    main()
