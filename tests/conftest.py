import pytest

from rpsls_playground.algorithms import Strategy, StrategyKind
from rpsls_playground.engine import Kind, Move


class FixedStrategy(Strategy):
    """Always plays the same kind."""
    name = "Fixed"
    kind = StrategyKind.NAIVE

    def __init__(self, fixed: Kind, **kwargs):
        super().__init__(**kwargs)
        self.fixed = fixed

    def choose(self, ledger, human_move):
        return Move(self.fixed, self.table)


@pytest.fixture
def fixed_strategy():
    return FixedStrategy
