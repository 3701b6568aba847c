"""The four computer opponents and the factory that picks between them."""

from abc import ABC, abstractmethod
from collections import Counter
from enum import Enum
import logging
import random
from typing import Mapping, Optional

import numpy as _np

from .engine import (
    DOMINANCE,
    InsufficientHistory,
    Kind,
    LedgerView,
    Move,
    Outcome,
    beaten_by,
)

logger = logging.getLogger(__name__)

# Computer-losing rounds at which Hal stops playing fair
LOSS_TRIGGER = 4


class StrategyKind(Enum):
    NAIVE = "naive"
    REFLECTIVE = "reflective"
    ADAPTIVE = "adaptive"
    WEIGHTED = "weighted"


class Strategy(ABC):
    """Base class for computer opponents.

    A strategy is a function of the ledger it is handed and the human's
    current move. The only state it keeps is its dominance table and the
    random generator, which callers may replace with a seeded one.
    """

    name: str
    kind: StrategyKind
    welcome = ""

    def __init__(self, table: Mapping[Kind, frozenset] = DOMINANCE, rng: Optional[random.Random] = None):
        self.table = table
        self.rng: random.Random = rng if rng is not None else random.Random()
        self._kinds = list(table)

    @abstractmethod
    def choose(self, ledger: LedgerView, human_move: Move) -> Move:
        ...

    @property
    def welcome_message(self) -> str:
        return f"Prepare to play {self.name}{self.welcome}"

    def random_move(self) -> Move:
        return Move(self.rng.choice(self._kinds), self.table)

    def losing_rounds(self, ledger: LedgerView) -> list:
        """Rounds the computer lost, i.e. the human won."""
        return list(ledger.losing_rounds_for(Outcome.HUMAN))

    def __repr__(self):
        return f"<{self.name}>"


# ---------------------------------------------------------------------------
# Naive: uniform random
# ---------------------------------------------------------------------------

class Naive(Strategy):
    """Chooses one of the five kinds uniformly at random.

    Ignores the history and the human's move entirely. The other opponents
    fall back to it whenever they have nothing better to go on.
    """
    name = "Dice"
    kind = StrategyKind.NAIVE
    welcome = " - anything can happen!"

    def choose(self, ledger, human_move):
        return self.random_move()


# ---------------------------------------------------------------------------
# Reflective: one round of memory
# ---------------------------------------------------------------------------

class Reflective(Strategy):
    """Copies either the human's previous move or their current one.

    With an empty history it simply mirrors the current move. Afterwards it
    picks uniformly between the kind the human played last round and the kind
    they are playing now.
    """
    name = "R2D2"
    kind = StrategyKind.REFLECTIVE
    welcome = " - he doesn't have the best memory!"

    def choose(self, ledger, human_move):
        if not ledger:
            return Move(human_move.kind, self.table)
        candidates = [ledger[-1].human_move, human_move.kind]
        return Move(self.rng.choice(candidates), self.table)


# ---------------------------------------------------------------------------
# Adaptive: unbeatable at exactly four losses
# ---------------------------------------------------------------------------

class Adaptive(Strategy):
    """Plays fair until the human is one point from winning, then cheats.

    When the computer has lost exactly ``LOSS_TRIGGER`` rounds it looks at the
    human's current move and answers with one of the two kinds that beat it.
    At any other loss count, including more than ``LOSS_TRIGGER``, it plays
    uniformly at random.
    """
    name = "Hal"
    kind = StrategyKind.ADAPTIVE
    welcome = " - he'll let you hope!"

    def choose(self, ledger, human_move):
        if len(self.losing_rounds(ledger)) == LOSS_TRIGGER:
            counters = sorted(beaten_by(human_move.kind, self.table), key=lambda k: k.value)
            logger.debug("%s countering %s with one of %s", self.name, human_move, counters)
            return Move(self.rng.choice(counters), self.table)
        return self.random_move()


# ---------------------------------------------------------------------------
# Weighted minimization
# ---------------------------------------------------------------------------

class WeightedMinimization(Strategy):
    """Steers its random choice away from moves that have been losing.

    Every round the human won tells Watson which two kinds would have lost to
    the human's move. Those kinds are counted over the whole history and each
    kind is weighted ``(1 - count / total) ** 2``, so moves that keep showing
    up on the losing side are played less often.

    **Sampling**: weights are normalized to sum to 1, shuffled, then walked
    against a uniform threshold.
    """
    name = "Watson"
    kind = StrategyKind.WEIGHTED
    welcome = " - be unpredictable"

    def choose(self, ledger, human_move):
        if not self.losing_rounds(ledger):
            return self.random_move()
        weighted = list(self.minimize_losing_moves(ledger).items())
        self.rng.shuffle(weighted)
        return Move(self.weighted_random_sample(weighted), self.table)

    def minimize_losing_moves(self, ledger: LedgerView) -> dict:
        """Selection weight per kind, normalized to sum to 1."""
        win_moves = human_win_moves(self.losing_rounds(ledger))
        frequency = fill_in_moves(
            Counter(k for moves in losing_moves(win_moves, self.table) for k in moves),
            self._kinds,
        )
        weights = convert_to_weighted(frequency, self._kinds)
        logger.debug("%s weights: %s", self.name, {k.value: round(w, 3) for k, w in weights.items()})
        return weights

    def weighted_random_sample(self, weighted: list) -> Kind:
        target = self.rng.random()
        for kind, weight in weighted:
            target -= weight
            if target <= 0:
                return kind
        # Round-off can leave a sliver of the threshold unspent
        return weighted[-1][0]


def human_win_moves(rounds) -> Counter:
    """Count the human's kinds over the rounds the computer lost."""
    return Counter(entry.human_move for entry in rounds)


def losing_moves(win_moves: Counter, table: Mapping[Kind, frozenset] = DOMINANCE) -> list:
    """One set of losing computer kinds per round the human won."""
    sets = []
    for kind, count in win_moves.items():
        sets.extend([table[kind]] * count)
    return sets


def fill_in_moves(frequency: Counter, kinds) -> dict:
    return {kind: frequency.get(kind, 0) for kind in kinds}


def convert_to_weighted(frequency: dict, kinds) -> dict:
    """Map losing-move counts to normalized selection weights."""
    counts = _np.array([frequency[k] for k in kinds], dtype=float)
    total = counts.sum()
    if total == 0:
        raise InsufficientHistory("No losing rounds to weight moves by")
    weights = (1.0 - counts / total) ** 2
    weights /= weights.sum()
    return {kind: float(w) for kind, w in zip(kinds, weights)}


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

ALL_STRATEGY_CLASSES = [Naive, Reflective, Adaptive, WeightedMinimization]

_BY_KIND = {cls.kind: cls for cls in ALL_STRATEGY_CLASSES}


def make_strategy(
    kind: StrategyKind,
    table: Mapping[Kind, frozenset] = DOMINANCE,
    rng: Optional[random.Random] = None,
) -> Strategy:
    return _BY_KIND[StrategyKind(kind)](table=table, rng=rng)


def get_strategy_by_name(name: str, rng: Optional[random.Random] = None) -> Strategy:
    """Get a strategy by display name or kind (case-insensitive)."""
    name_lower = name.strip().lower()
    for cls in ALL_STRATEGY_CLASSES:
        if name_lower in (cls.name.lower(), cls.kind.value):
            return cls(rng=rng)
    available = ", ".join(f"{cls.name} ({cls.kind.value})" for cls in ALL_STRATEGY_CLASSES)
    raise ValueError(f"Unknown opponent: '{name}'. Available: {available}")


def random_strategy(rng: Optional[random.Random] = None) -> Strategy:
    """Pick an opponent for a new session uniformly at random."""
    picker = rng if rng is not None else random.Random()
    cls = picker.choice(ALL_STRATEGY_CLASSES)
    return cls(rng=rng)
