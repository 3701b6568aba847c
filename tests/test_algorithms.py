import random
from collections import Counter

import pytest

from rpsls_playground.algorithms import (
    ALL_STRATEGY_CLASSES,
    LOSS_TRIGGER,
    Adaptive,
    Naive,
    Reflective,
    StrategyKind,
    WeightedMinimization,
    convert_to_weighted,
    get_strategy_by_name,
    losing_moves,
    make_strategy,
    random_strategy,
)
from rpsls_playground.engine import InsufficientHistory, Kind, Ledger, Move, Outcome


def ledger_with_losses(losses: int, human_kind: Kind = Kind.ROCK, ties: int = 0) -> Ledger:
    ledger = Ledger()
    for _ in range(ties):
        ledger.record(Outcome.TIE, Kind.PAPER, Kind.PAPER)
    for _ in range(losses):
        ledger.record(Outcome.HUMAN, human_kind, Kind.SCISSORS)
    return ledger


def sample(strategy, ledger, human_kind, trials=2000):
    view = ledger.view()
    return Counter(strategy.choose(view, Move(human_kind)).kind for _ in range(trials))


def test_naive_is_roughly_uniform():
    counts = sample(Naive(rng=random.Random(7)), Ledger(), Kind.ROCK, trials=10000)
    assert set(counts) == set(Kind)
    for kind in Kind:
        assert 1800 <= counts[kind] <= 2200


def test_reflective_mirrors_on_empty_ledger():
    strategy = Reflective(rng=random.Random(1))
    for _ in range(20):
        assert strategy.choose(Ledger().view(), Move(Kind.ROCK)).kind == Kind.ROCK


def test_reflective_picks_previous_or_current():
    ledger = Ledger()
    ledger.record(Outcome.COMPUTER, Kind.PAPER, Kind.SCISSORS)
    counts = sample(Reflective(rng=random.Random(2)), ledger, Kind.LIZARD, trials=500)
    assert set(counts) == {Kind.PAPER, Kind.LIZARD}


def test_reflective_only_remembers_one_round():
    ledger = Ledger()
    ledger.record(Outcome.COMPUTER, Kind.SPOCK, Kind.LIZARD)
    ledger.record(Outcome.TIE, Kind.ROCK, Kind.ROCK)
    counts = sample(Reflective(rng=random.Random(3)), ledger, Kind.PAPER, trials=500)
    assert set(counts) == {Kind.ROCK, Kind.PAPER}


def test_adaptive_counters_at_exactly_four_losses():
    ledger = ledger_with_losses(LOSS_TRIGGER, ties=3)
    counts = sample(Adaptive(rng=random.Random(4)), ledger, Kind.SPOCK, trials=1000)
    # paper disproves spock, lizard poisons spock
    assert set(counts) == {Kind.PAPER, Kind.LIZARD}


@pytest.mark.parametrize("losses", [0, 3, 5])
def test_adaptive_plays_random_off_the_trigger(losses):
    ledger = ledger_with_losses(losses)
    counts = sample(Adaptive(rng=random.Random(5)), ledger, Kind.SPOCK, trials=1000)
    assert set(counts) == set(Kind)


def test_adaptive_ignores_computer_wins():
    ledger = ledger_with_losses(3)
    ledger.record(Outcome.COMPUTER, Kind.ROCK, Kind.PAPER)
    counts = sample(Adaptive(rng=random.Random(6)), ledger, Kind.ROCK, trials=1000)
    assert set(counts) == set(Kind)


def test_weighted_is_uniform_without_losses():
    ledger = Ledger()
    ledger.record(Outcome.COMPUTER, Kind.ROCK, Kind.PAPER)
    counts = sample(WeightedMinimization(rng=random.Random(8)), ledger, Kind.ROCK, trials=5000)
    for kind in Kind:
        assert 850 <= counts[kind] <= 1150


def test_weighted_weights_for_repeated_rock_wins():
    ledger = ledger_with_losses(3, human_kind=Kind.ROCK)
    weights = WeightedMinimization().minimize_losing_moves(ledger.view())
    assert sum(weights.values()) == pytest.approx(1.0)
    assert weights[Kind.SCISSORS] == pytest.approx(1 / 14)
    assert weights[Kind.LIZARD] == pytest.approx(1 / 14)
    for kind in (Kind.ROCK, Kind.PAPER, Kind.SPOCK):
        assert weights[kind] == pytest.approx(4 / 14)


def test_weighted_avoids_moves_that_lost_to_rock():
    ledger = ledger_with_losses(4, human_kind=Kind.ROCK)
    counts = sample(WeightedMinimization(rng=random.Random(9)), ledger, Kind.PAPER, trials=7000)
    losers = max(counts[Kind.SCISSORS], counts[Kind.LIZARD])
    others = min(counts[Kind.ROCK], counts[Kind.PAPER], counts[Kind.SPOCK])
    assert losers < others


def test_weighted_mixed_history():
    ledger = Ledger()
    ledger.record(Outcome.HUMAN, Kind.ROCK, Kind.SCISSORS)
    ledger.record(Outcome.HUMAN, Kind.ROCK, Kind.LIZARD)
    ledger.record(Outcome.HUMAN, Kind.PAPER, Kind.SPOCK)
    weights = WeightedMinimization().minimize_losing_moves(ledger.view())
    # counts: scissors 2, lizard 2, rock 1, spock 1, paper 0 out of 6
    assert weights[Kind.PAPER] > weights[Kind.ROCK] == pytest.approx(weights[Kind.SPOCK])
    assert weights[Kind.ROCK] > weights[Kind.SCISSORS] == pytest.approx(weights[Kind.LIZARD])


def test_losing_moves_expands_one_set_per_loss():
    sets = losing_moves(Counter({Kind.SPOCK: 2, Kind.PAPER: 1}))
    assert len(sets) == 3
    assert sets.count(frozenset({Kind.ROCK, Kind.SCISSORS})) == 2
    assert frozenset({Kind.ROCK, Kind.SPOCK}) in sets


def test_convert_to_weighted_requires_history():
    with pytest.raises(InsufficientHistory):
        convert_to_weighted({kind: 0 for kind in Kind}, list(Kind))


def test_weighted_sample_falls_back_to_last_entry():
    strategy = WeightedMinimization(rng=random.Random(10))
    weighted = [(Kind.ROCK, 0.0), (Kind.PAPER, 0.0)]
    assert strategy.weighted_random_sample(weighted) == Kind.PAPER


def test_choose_does_not_touch_the_ledger():
    ledger = ledger_with_losses(4)
    before = ledger.entries()
    for strategy in (Naive(), Reflective(), Adaptive(), WeightedMinimization()):
        strategy.choose(ledger.view(), Move(Kind.ROCK))
    assert ledger.entries() == before


def test_seeded_strategies_are_reproducible():
    ledger = ledger_with_losses(2, human_kind=Kind.LIZARD)
    a = WeightedMinimization(rng=random.Random(11))
    b = WeightedMinimization(rng=random.Random(11))
    moves_a = [a.choose(ledger.view(), Move(Kind.ROCK)).kind for _ in range(50)]
    moves_b = [b.choose(ledger.view(), Move(Kind.ROCK)).kind for _ in range(50)]
    assert moves_a == moves_b


def test_make_strategy_covers_every_kind():
    for kind in StrategyKind:
        assert make_strategy(kind).kind == kind
    assert isinstance(make_strategy("weighted"), WeightedMinimization)


def test_get_strategy_by_name():
    assert isinstance(get_strategy_by_name("hal"), Adaptive)
    assert isinstance(get_strategy_by_name("Reflective"), Reflective)
    assert isinstance(get_strategy_by_name("WATSON"), WeightedMinimization)
    with pytest.raises(ValueError, match="Unknown opponent"):
        get_strategy_by_name("deep blue")


def test_random_strategy_draws_from_all_four():
    rng = random.Random(12)
    names = {random_strategy(rng).name for _ in range(200)}
    assert names == {cls.name for cls in ALL_STRATEGY_CLASSES}


def test_welcome_messages_name_the_opponent():
    for cls in ALL_STRATEGY_CLASSES:
        assert cls().welcome_message.startswith(f"Prepare to play {cls.name}")
