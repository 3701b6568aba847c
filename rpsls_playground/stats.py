"""Text rendering of round history, scores and simulation summaries."""

from .engine import LedgerView, Outcome
from .session import HISTORY_WINDOW, Session, SimulationResult

# Arrow points at the round's winner
RESULT_SYMBOLS = {
    Outcome.HUMAN: "<-",
    Outcome.COMPUTER: "->",
    Outcome.TIE: "--",
}


def format_history(
    ledger: LedgerView,
    human_name: str,
    computer_name: str,
    window: int = HISTORY_WINDOW,
) -> list[str]:
    """Lines describing the most recent ``window`` rounds."""
    lines = [
        "----- GAME HISTORY ------",
        f"Round # - {human_name} // {computer_name}",
    ]
    for entry in ledger.last(window):
        symbol = RESULT_SYMBOLS[entry.outcome]
        lines.append(
            f"{entry.round_number} - {entry.human_move.value} /{symbol}/ {entry.computer_move.value}"
        )
    return lines


def format_score(session: Session) -> str:
    return f"{session.human_name}: {session.human_score}, {session.computer_name}: {session.computer_score}"


def format_round_winner(session: Session, outcome: Outcome) -> str:
    if outcome == Outcome.HUMAN:
        return f"{session.human_name} won!"
    if outcome == Outcome.COMPUTER:
        return f"{session.computer_name} won!"
    return "It's a tie!"


# ---------------------------------------------------------------------------
# Pretty-printing
# ---------------------------------------------------------------------------

def _most_common(distribution: dict[str, int]) -> str:
    if not distribution:
        return "N/A"
    return max(distribution.items(), key=lambda item: item[1])[0]


def print_simulation_summary(result: SimulationResult):
    """Print a detailed summary of a simulated run."""
    human_dist = result.human_move_distribution
    computer_dist = result.computer_move_distribution

    print("=" * 60)
    print(f"  {result.policy_name} (human)  vs  {result.opponent_name}")
    print(f"  Rounds: {result.rounds}")
    print("=" * 60)
    print(f"  {'':20s} {'Human':>10s} {'Computer':>10s}")
    print(f"  {'Wins':20s} {result.human_wins:>10d} {result.computer_wins:>10d}")
    print(f"  {'Losses':20s} {result.computer_wins:>10d} {result.human_wins:>10d}")
    print(f"  {'Ties':20s} {result.ties:>10d} {result.ties:>10d}")
    print(f"  {'Win %':20s} {result.human_win_pct:>9.1f}% {result.computer_win_pct:>9.1f}%")
    print(f"  {'Most Common Move':20s} {_most_common(human_dist):>10s} {_most_common(computer_dist):>10s}")
    print()
    print(f"  Human move distribution:    {human_dist}")
    print(f"  Computer move distribution: {computer_dist}")

    if result.human_wins > result.computer_wins:
        winner = "Human"
    elif result.computer_wins > result.human_wins:
        winner = result.opponent_name
    else:
        winner = "DRAW"
    print(f"\n  ★ Winner: {winner}")
    print("=" * 60)
