"""
Rich-based CLI consumer for TournamentEvent objects.

Tournament-level events (bracket, round, match result) are rendered with
Rich panels and tables.  render_bracket() prints a whole match graph grouped
by side and round, independent of any event stream.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from bracketengine.tournaments.base import (
    BracketMatch,
    BracketSide,
    SwissStanding,
    TournamentFormat,
)
from bracketengine.tournaments.events import (
    MatchCompleteEvent,
    RoundCompleteEvent,
    RoundStartEvent,
    TournamentCompleteEvent,
    TournamentEvent,
    TournamentStartEvent,
)
from bracketengine.tournaments.single_elimination import round_label

console = Console(legacy_windows=False)

_SIDE_TITLES: dict[BracketSide | None, str] = {
    None: "Swiss",
    "winners": "Winners Bracket",
    "losers": "Losers Bracket",
    "grand_finals": "Grand Finals",
    "grand_finals_reset": "Grand Finals Reset",
}


def display_tournament_event(event: TournamentEvent) -> None:
    """Dispatch a TournamentEvent to the appropriate display function."""
    match event:
        case TournamentStartEvent():
            _tournament_start(event)
        case RoundStartEvent():
            _round_start(event)
        case MatchCompleteEvent():
            _match_complete(event)
        case RoundCompleteEvent():
            _round_complete(event)
        case TournamentCompleteEvent():
            _tournament_complete(event)


def render_bracket(
    grouped: dict[tuple[BracketSide | None, int], list[BracketMatch]],
    format: TournamentFormat,
) -> None:
    """Print every match of a bracket, one table per (side, round)."""
    for (side, round_num), matches in grouped.items():
        side_title = "Bracket" if format == "single_elimination" else _SIDE_TITLES[side]
        table = Table(
            title=f"{side_title} — Round {round_num}",
            show_header=True,
            header_style="bold",
            border_style="dim",
        )
        table.add_column("Match", style="dim", width=10)
        table.add_column("A", min_width=16)
        table.add_column("B", min_width=16)
        table.add_column("Status", width=10)
        table.add_column("Winner", min_width=16)
        for m in matches:
            label = m.id
            if format == "single_elimination":
                label = round_label(m.round, m.position, len(matches))
            table.add_row(
                label,
                _slot(m.participant_a, m.winner),
                _slot(m.participant_b, m.winner),
                m.status,
                m.winner or ("draw" if m.is_draw else ""),
            )
        console.print(table)


# --------------------------------------------------------------------------- #
# Display functions                                                            #
# --------------------------------------------------------------------------- #

def _tournament_start(event: TournamentStartEvent) -> None:
    names = "  •  ".join(event.participant_ids)
    console.print()
    console.print(
        Panel(
            f"[bold]{event.tournament_name}[/]  "
            f"[dim]({event.format.replace('_', ' ').title()})[/]\n\n"
            f"[dim]Participants ({len(event.participant_ids)}):[/]\n{names}\n\n"
            f"[dim]Matches generated: {event.total_matches}  •  "
            f"{event.timestamp.strftime('%Y-%m-%d %H:%M:%S')}[/]",
            title="[bold green] Bracket Engine [/]",
            border_style="green",
            expand=False,
        )
    )


def _round_start(event: RoundStartEvent) -> None:
    title = f"Round {event.round_num}" if event.swiss else f"Wave {event.round_num}"
    console.print()
    console.rule(f"[bold]{title}[/]", style="bright_blue")
    console.print()

    table = Table(show_header=True, header_style="bold", border_style="dim", show_lines=False)
    table.add_column("Match", style="dim", width=8)
    table.add_column("A", min_width=20)
    table.add_column("", width=3, justify="center")
    table.add_column("B", min_width=20)

    for match_id, a, b in event.pairings:
        if b is None:
            table.add_row(match_id, f"[bold]{a}[/]", "→", "[dim]BYE[/]")
        else:
            table.add_row(match_id, f"[bold]{a}[/]", "vs", f"[bold]{b}[/]")

    console.print(table)
    console.print()


def _match_complete(event: MatchCompleteEvent) -> None:
    m = event.match
    if m.winner:
        summary = f"[green]✓[/] {m.id}: [bold]{m.winner}[/] beat {m.loser}"
    else:
        summary = f"[yellow]½[/] {m.id}: {m.participant_a} drew with {m.participant_b}"
    if m.forced_rematch:
        summary += "  [yellow](forced rematch)[/]"
    if event.eliminated:
        summary += f"  [red]✗ {', '.join(event.eliminated)} eliminated[/]"
    if event.advanced_ids:
        summary += f"  [dim]→ {', '.join(event.advanced_ids)}[/]"
    console.print(f"  {summary}")


def _round_complete(event: RoundCompleteEvent) -> None:
    console.print()
    console.rule(f"[dim]Round {event.round_num} complete[/]", style="dim")

    if not event.standings:
        return

    console.print()
    console.print(_standings_table(event.standings, f"Standings after Round {event.round_num}"))


def _tournament_complete(event: TournamentCompleteEvent) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold yellow]★  {event.champion}[/]\n\n"
            f"[dim]{event.timestamp.strftime('%Y-%m-%d %H:%M:%S')}[/]",
            title="[bold green] Tournament Champion [/]",
            border_style="yellow",
            expand=False,
        )
    )

    if event.standings:
        console.print()
        console.print(_standings_table(event.standings, "Final Standings", highlight_first=True))
        console.print()
        return

    table = Table(title="Final Placements", show_header=True, header_style="bold", border_style="dim")
    table.add_column("#", style="dim", width=3, justify="right")
    table.add_column("Participant", min_width=20)
    for placement in event.placements:
        style = "bold yellow" if placement.rank == 1 else ""
        table.add_row(str(placement.rank), placement.participant, style=style)
    console.print()
    console.print(table)
    console.print()


def _standings_table(
    standings: list[SwissStanding], title: str, highlight_first: bool = False
) -> Table:
    table = Table(
        title=title,
        show_header=True,
        header_style="bold",
        border_style="dim",
        show_lines=False,
    )
    table.add_column("#", style="dim", width=3, justify="right")
    table.add_column("Name", min_width=20)
    table.add_column("W", justify="center", width=4)
    table.add_column("D", justify="center", width=4)
    table.add_column("L", justify="center", width=4)
    table.add_column("Pts", justify="right", width=5)
    table.add_column("Buch", justify="right", width=6)
    table.add_column("SB", justify="right", width=6)

    for i, entry in enumerate(standings, 1):
        style = "bold yellow" if highlight_first and i == 1 else ""
        table.add_row(
            str(i),
            entry.participant,
            str(entry.wins),
            str(entry.draws),
            str(entry.losses),
            f"{entry.points:.1f}",
            f"{entry.buchholz:.1f}",
            f"{entry.sonneborn_berger:.2f}",
            style=style,
        )
    return table


def _slot(participant: str | None, winner: str | None) -> str:
    if participant is None:
        return "[dim]—[/]"
    if participant == winner:
        return f"[bold green]{participant}[/]"
    return participant
