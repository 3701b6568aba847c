"""Core decision/outcome engine for Rock-Paper-Scissors-Lizard-Spock."""

from enum import Enum
from dataclasses import dataclass, field
from collections import Counter
from types import MappingProxyType
from typing import Iterator, Mapping, Union


class InvalidMoveKind(ValueError):
    """Raised when a move is built from anything but one of the five kinds."""


class InsufficientHistory(ValueError):
    """Raised when a history-driven computation has no losing rounds to use."""


class Kind(Enum):
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"
    LIZARD = "lizard"
    SPOCK = "spock"


class Outcome(Enum):
    HUMAN = "human"
    COMPUTER = "computer"
    TIE = "tie"


# What each kind beats
DOMINANCE: Mapping[Kind, frozenset] = MappingProxyType({
    Kind.ROCK: frozenset({Kind.SCISSORS, Kind.LIZARD}),
    Kind.PAPER: frozenset({Kind.ROCK, Kind.SPOCK}),
    Kind.SCISSORS: frozenset({Kind.PAPER, Kind.LIZARD}),
    Kind.LIZARD: frozenset({Kind.PAPER, Kind.SPOCK}),
    Kind.SPOCK: frozenset({Kind.ROCK, Kind.SCISSORS}),
})


def validate_dominance(table: Mapping[Kind, frozenset]) -> None:
    """Check that ``table`` is a balanced tournament over every kind.

    Each kind must beat exactly two others, lose to exactly two others and
    never beat itself; if A beats B then B must not beat A.
    """
    missing = set(Kind) - set(table)
    if missing:
        raise ValueError(f"Dominance table is missing: {sorted(k.value for k in missing)}")

    for kind, beaten in table.items():
        if len(beaten) != 2:
            raise ValueError(f"{kind.value} must beat exactly 2 kinds, got {len(beaten)}")
        if kind in beaten:
            raise ValueError(f"{kind.value} cannot beat itself")
        for other in beaten:
            if kind in table[other]:
                raise ValueError(f"{kind.value} and {other.value} beat each other")

    for kind in table:
        losses = sum(1 for beaten in table.values() if kind in beaten)
        if losses != 2:
            raise ValueError(f"{kind.value} must lose to exactly 2 kinds, got {losses}")


validate_dominance(DOMINANCE)


def beaten_by(kind: Kind, table: Mapping[Kind, frozenset] = DOMINANCE) -> frozenset:
    """Return the kinds that beat ``kind``."""
    return frozenset(winner for winner, beaten in table.items() if kind in beaten)


@dataclass(frozen=True)
class Move:
    kind: Kind
    table: Mapping[Kind, frozenset] = field(default_factory=lambda: DOMINANCE, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.kind, Kind) or self.kind not in self.table:
            raise InvalidMoveKind(f"Unknown move kind: {self.kind!r}")

    @classmethod
    def from_symbol(cls, symbol: Union[Kind, str], table: Mapping[Kind, frozenset] = DOMINANCE) -> "Move":
        """Build a move from a ``Kind`` or its case-insensitive name."""
        if isinstance(symbol, Kind):
            return cls(symbol, table)
        if isinstance(symbol, str):
            try:
                return cls(Kind(symbol.strip().lower()), table)
            except ValueError:
                pass
        raise InvalidMoveKind(f"Unknown move kind: {symbol!r}")

    def beats(self, other: "Move") -> bool:
        return other.kind in self.table[self.kind]

    def __str__(self):
        return self.kind.value


def determine_winner(move_a: Move, move_b: Move) -> int:
    """Return 1 if A wins, -1 if B wins, 0 for draw."""
    if move_a.beats(move_b):
        return 1
    if move_b.beats(move_a):
        return -1
    return 0


def outcome_of(human_move: Move, computer_move: Move) -> Outcome:
    result = determine_winner(human_move, computer_move)
    if result == 1:
        return Outcome.HUMAN
    if result == -1:
        return Outcome.COMPUTER
    return Outcome.TIE


@dataclass(frozen=True)
class RoundEntry:
    """One completed round as stored in the ledger."""
    round_number: int
    outcome: Outcome
    human_move: Kind
    computer_move: Kind

    def to_dict(self) -> dict:
        return {
            "round": self.round_number,
            "result": self.outcome.value,
            "human": self.human_move.value,
            "computer": self.computer_move.value,
        }


class LedgerView:
    """O(1) read-only view of a round history list.

    Wraps a reference to the ledger's internal list without copying, so a
    view handed to a strategy sees rounds recorded after it was created but
    offers no way to append, pop or edit entries.
    """
    __slots__ = ('_data',)

    def __init__(self, data: list):
        self._data = data

    def __getitem__(self, key):
        return self._data[key]

    def __len__(self):
        return len(self._data)

    def __iter__(self):
        return iter(self._data)

    def __bool__(self):
        return bool(self._data)

    def __repr__(self):
        return f"{type(self).__name__}({self._data!r})"

    def entries(self) -> tuple:
        """Immutable snapshot of every entry in chronological order."""
        return tuple(self._data)

    def last(self, n: int) -> tuple:
        if n <= 0:
            return ()
        return tuple(self._data[-n:])

    def losing_rounds_for(self, side: Outcome) -> Iterator[RoundEntry]:
        """Lazily yield the rounds ``side`` won.

        Called with ``Outcome.HUMAN`` this is the computer's losing rounds.
        """
        return (entry for entry in self._data if entry.outcome == side)

    def winning_moves(self, side: Outcome) -> Counter:
        """Count the kinds ``side`` played in the rounds it won."""
        if side == Outcome.HUMAN:
            return Counter(e.human_move for e in self.losing_rounds_for(side))
        if side == Outcome.COMPUTER:
            return Counter(e.computer_move for e in self.losing_rounds_for(side))
        raise ValueError("Ties have no winning moves")


class Ledger(LedgerView):
    """Append-only history of the rounds of one session."""
    __slots__ = ('_view',)

    def __init__(self):
        super().__init__([])
        self._view = LedgerView(self._data)

    def record(self, outcome: Outcome, human_kind: Kind, computer_kind: Kind) -> RoundEntry:
        entry = RoundEntry(
            round_number=len(self._data) + 1,
            outcome=outcome,
            human_move=human_kind,
            computer_move=computer_kind,
        )
        self._data.append(entry)
        return entry

    def reset(self):
        """Forget every round. Only called between sessions."""
        self._data.clear()

    def view(self) -> LedgerView:
        return self._view


class Resolver:
    """Decides each round and writes it to the ledger."""

    def __init__(self, ledger: Ledger):
        self.ledger = ledger

    def resolve(self, human_move: Move, computer_move: Move) -> Outcome:
        outcome = outcome_of(human_move, computer_move)
        self.ledger.record(outcome, human_move.kind, computer_move.kind)
        return outcome
