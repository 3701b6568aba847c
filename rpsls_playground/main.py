"""CLI entry point for Rock-Paper-Scissors-Lizard-Spock."""

import argparse
import logging
import os
import random
from typing import Callable, Optional

from .algorithms import ALL_STRATEGY_CLASSES, get_strategy_by_name, random_strategy
from .engine import Move
from .session import HISTORY_WINDOW, TARGET_SCORE, Session, run_simulation
from .stats import (
    format_history,
    format_round_winner,
    format_score,
    print_simulation_summary,
)

CONVERT_CHOICE = {
    "r": "rock",
    "p": "paper",
    "s": "scissors",
    "l": "lizard",
    "k": "spock",
}


def prompt(message: str, output: Callable[[str], None] = print):
    output(f"=> {message}")


def clear_screen():
    os.system("cls" if os.name == "nt" else "clear")


def parse_choice(text: str) -> Optional[Move]:
    """Turn console input into a move, or None if it isn't one."""
    choice = text.strip().lower()
    choice = CONVERT_CHOICE.get(choice, choice)
    if choice not in CONVERT_CHOICE.values():
        return None
    return Move.from_symbol(choice)


class ConsoleGame:
    """Interactive game loop: prompts, rounds, score, history, rematches."""

    def __init__(
        self,
        session: Session,
        input_fn: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
        clear: Callable[[], None] = clear_screen,
        history_window: int = HISTORY_WINDOW,
    ):
        self.session = session
        self.input_fn = input_fn
        self.output = output
        self.clear = clear
        self.history_window = history_window

    def say(self, message: str):
        prompt(message, self.output)

    def ask_name(self) -> str:
        while True:
            self.say("What's your name?")
            name = self.input_fn("").strip()
            if name:
                return name
            self.say("Sorry, must enter a name.")

    def ask_move(self) -> Move:
        while True:
            self.say("Please choose (r)ock, (p)aper, (s)cissors, (l)izard, or spoc(k):")
            move = parse_choice(self.input_fn(""))
            if move is not None:
                return move
            self.say("Sorry, invalid choice.")

    def ask_play_again(self) -> bool:
        while True:
            self.say("Would you like to play again? (y/n)")
            answer = self.input_fn("").strip().lower()
            if answer in ("y", "n"):
                return answer == "y"
            self.say("Sorry, must be y or n.")

    def play_round(self):
        session = self.session
        entry = session.play_round(self.ask_move())
        self.clear()
        self.say(f"{session.human_name} chose {entry.human_move.value}.")
        self.say(f"{session.computer_name} chose {entry.computer_move.value}.")
        self.say(format_round_winner(session, entry.outcome))
        self.say(format_score(session))
        for line in format_history(session.ledger, session.human_name,
                                   session.computer_name, self.history_window):
            self.say(line)

    def play(self):
        self.session.human_name = self.ask_name()
        while True:
            self.session.start()
            self.say("Welcome to Rock, Paper, Scissors, Lizard, Spock!")
            self.say(self.session.strategy.welcome_message)
            while not self.session.is_over:
                self.play_round()
            self.say("Game complete!")
            if not self.ask_play_again():
                break
        self.say("Goodbye!")


def list_opponents():
    """Print all available opponents."""
    print("\nAvailable Opponents:")
    print("-" * 40)
    for i, cls in enumerate(ALL_STRATEGY_CLASSES, 1):
        print(f"  {i:>2d}. {cls.name:<10s} ({cls.kind.value})")
    print()


def _pick_opponent(args):
    rng = random.Random(args.seed) if args.seed is not None else None
    if args.opponent:
        return get_strategy_by_name(args.opponent, rng=rng)
    return random_strategy(rng)


def cmd_play(args):
    """Play interactively in the terminal."""
    session = Session(_pick_opponent(args), target_score=args.target_score)
    ConsoleGame(session, history_window=args.history).play()


def cmd_simulate(args):
    """Run a scripted human against an opponent."""
    strategy = get_strategy_by_name(args.opponent)
    print(f"\n🤖 Simulation")
    print(f"  {args.human_policy} vs {strategy.name}  |  {args.rounds} rounds"
          + (f"  |  seed={args.seed}" if args.seed is not None else ""))

    result = run_simulation(strategy, args.human_policy, rounds=args.rounds, seed=args.seed)
    print_simulation_summary(result)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="rpsls_playground",
        description="🎮 Rock-Paper-Scissors-Lizard-Spock against the computer",
    )
    parser.add_argument("--list", action="store_true", help="List all available opponents")
    parser.add_argument("--verbose", action="store_true", help="Log strategy decisions")

    subparsers = parser.add_subparsers(dest="command")

    play = subparsers.add_parser("play", help="Play in the terminal")
    play.add_argument("--opponent", help="Opponent name or kind (default: random)")
    play.add_argument("--target-score", type=int, default=TARGET_SCORE,
                      help=f"Points needed to win a game (default: {TARGET_SCORE})")
    play.add_argument("--history", type=int, default=HISTORY_WINDOW,
                      help=f"Rounds of history to show (default: {HISTORY_WINDOW})")
    play.add_argument("--seed", type=int, default=None, help="RNG seed for reproducibility")

    sim = subparsers.add_parser("simulate", help="Scripted human vs an opponent")
    sim.add_argument("--opponent", required=True, help="Opponent name or kind")
    sim.add_argument("--human-policy", default="random",
                     help="random, cycle, or a kind to always play (default: random)")
    sim.add_argument("--rounds", type=int, default=1000, help="Number of rounds (default: 1000)")
    sim.add_argument("--seed", type=int, default=None, help="RNG seed for reproducibility")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.list:
        list_opponents()
        return

    try:
        if args.command == "play":
            cmd_play(args)
        elif args.command == "simulate":
            cmd_simulate(args)
        else:
            parser.print_help()
    except ValueError as e:
        parser.error(str(e))


if __name__ == "__main__":
    main()
