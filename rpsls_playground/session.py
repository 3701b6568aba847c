"""Session controller: owns the ledger, the scores and one opponent."""

from dataclasses import dataclass, field
from collections import Counter
import logging
import os
import random
from typing import Callable, Optional

from .engine import Kind, Ledger, Move, Outcome, Resolver, RoundEntry
from .algorithms import Strategy

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment, falling back to ``default``."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        logger.warning("Ignoring %s=%r: expected a positive integer, using %d", name, raw, default)
        return default
    return value


TARGET_SCORE = _env_int("RPSLS_TARGET_SCORE", 5)
HISTORY_WINDOW = _env_int("RPSLS_HISTORY_WINDOW", 5)


class GameOver(RuntimeError):
    """Raised when a round is played after one side reached the target."""


class Session:
    """One human against one computer opponent, first to ``target_score``.

    The ledger is written only by the session's resolver; the strategy sees
    it through a read-only view.
    """

    def __init__(self, strategy: Strategy, target_score: int = TARGET_SCORE, human_name: str = "Human"):
        if target_score < 1:
            raise ValueError(f"target_score must be positive, got {target_score}")
        self.strategy = strategy
        self.target_score = target_score
        self.human_name = human_name
        self.ledger = Ledger()
        self.resolver = Resolver(self.ledger)
        self.human_score = 0
        self.computer_score = 0

    @property
    def computer_name(self) -> str:
        return self.strategy.name

    def start(self):
        """Reset score and history for a fresh game against the same opponent."""
        self.human_score = 0
        self.computer_score = 0
        self.ledger.reset()
        logger.debug("New game: %s vs %s, first to %d",
                     self.human_name, self.computer_name, self.target_score)

    def play_round(self, human_move: Move) -> RoundEntry:
        if self.is_over:
            raise GameOver(f"Game already won by {self.winner.value}")

        computer_move = self.strategy.choose(self.ledger.view(), human_move)
        outcome = self.resolver.resolve(human_move, computer_move)

        if outcome == Outcome.HUMAN:
            self.human_score += 1
        elif outcome == Outcome.COMPUTER:
            self.computer_score += 1

        entry = self.ledger[-1]
        logger.debug("Round %d: %s vs %s -> %s", entry.round_number,
                     entry.human_move.value, entry.computer_move.value, outcome.value)
        return entry

    @property
    def is_over(self) -> bool:
        return self.winner is not None

    @property
    def winner(self) -> Optional[Outcome]:
        if self.human_score >= self.target_score:
            return Outcome.HUMAN
        if self.computer_score >= self.target_score:
            return Outcome.COMPUTER
        return None

    def to_dict(self) -> dict:
        return {
            "human": self.human_name,
            "computer": self.computer_name,
            "opponent_kind": self.strategy.kind.value,
            "target_score": self.target_score,
            "human_score": self.human_score,
            "computer_score": self.computer_score,
            "rounds": len(self.ledger),
            "game_over": self.is_over,
            "winner": self.winner.value if self.winner else None,
        }


# ---------------------------------------------------------------------------
# Scripted human players for batch simulation
# ---------------------------------------------------------------------------

KINDS = list(Kind)

HumanPolicy = Callable[[int, random.Random], Kind]


def _random_policy(round_num: int, rng: random.Random) -> Kind:
    return rng.choice(KINDS)


def _cycle_policy(round_num: int, rng: random.Random) -> Kind:
    return KINDS[round_num % len(KINDS)]


def get_human_policy(name: str) -> HumanPolicy:
    """Resolve ``random``, ``cycle`` or a kind name (always play that kind)."""
    name_lower = name.strip().lower()
    if name_lower == "random":
        return _random_policy
    if name_lower == "cycle":
        return _cycle_policy
    try:
        constant = Kind(name_lower)
    except ValueError:
        available = ", ".join(["random", "cycle"] + [k.value for k in KINDS])
        raise ValueError(f"Unknown human policy: '{name}'. Available: {available}") from None
    return lambda round_num, rng: constant


@dataclass
class SimulationResult:
    """Result of a scripted human playing a strategy for N rounds."""
    opponent_name: str
    policy_name: str
    rounds: int
    human_wins: int = 0
    computer_wins: int = 0
    ties: int = 0
    human_moves: list = field(default_factory=list)
    computer_moves: list = field(default_factory=list)

    @property
    def human_win_pct(self) -> float:
        return (self.human_wins / self.rounds * 100) if self.rounds else 0.0

    @property
    def computer_win_pct(self) -> float:
        return (self.computer_wins / self.rounds * 100) if self.rounds else 0.0

    @property
    def tie_pct(self) -> float:
        return (self.ties / self.rounds * 100) if self.rounds else 0.0

    @property
    def human_move_distribution(self) -> dict[str, int]:
        return dict(Counter(k.value for k in self.human_moves))

    @property
    def computer_move_distribution(self) -> dict[str, int]:
        return dict(Counter(k.value for k in self.computer_moves))

    def to_dict(self) -> dict:
        return {
            "opponent": self.opponent_name,
            "policy": self.policy_name,
            "rounds": self.rounds,
            "human_wins": self.human_wins,
            "computer_wins": self.computer_wins,
            "ties": self.ties,
            "human_win_pct": round(self.human_win_pct, 2),
            "computer_win_pct": round(self.computer_win_pct, 2),
            "tie_pct": round(self.tie_pct, 2),
            "human_move_distribution": self.human_move_distribution,
            "computer_move_distribution": self.computer_move_distribution,
        }


def run_simulation(
    strategy: Strategy,
    policy_name: str = "random",
    rounds: int = 1000,
    seed: Optional[int] = None,
) -> SimulationResult:
    """Play ``rounds`` rounds on a single ledger with no score cut-off.

    The strategy and the human policy each get their own RNG derived from the
    master seed, so a fixed seed reproduces the whole run.
    """
    policy = get_human_policy(policy_name)
    master_rng = random.Random(seed)
    strategy.rng = random.Random(master_rng.randint(0, 2**31))
    human_rng = random.Random(master_rng.randint(0, 2**31))

    ledger = Ledger()
    resolver = Resolver(ledger)
    view = ledger.view()
    result = SimulationResult(
        opponent_name=strategy.name,
        policy_name=policy_name,
        rounds=rounds,
    )

    for round_num in range(rounds):
        human_move = Move(policy(round_num, human_rng), strategy.table)
        computer_move = strategy.choose(view, human_move)
        outcome = resolver.resolve(human_move, computer_move)
        if outcome == Outcome.HUMAN:
            result.human_wins += 1
        elif outcome == Outcome.COMPUTER:
            result.computer_wins += 1
        else:
            result.ties += 1
        result.human_moves.append(human_move.kind)
        result.computer_moves.append(computer_move.kind)

    logger.debug("Simulated %d rounds of %s vs %s", rounds, policy_name, strategy.name)
    return result
