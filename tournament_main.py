"""
Bracket Engine — tournament simulation entry point.

Usage:
    python tournament_main.py [config.yaml] [--only TOURNAMENT_ID]

Wires together:
    config → in-memory store → orchestrator → bracket generation →
    simulation runner → CLI display
"""

from __future__ import annotations

import argparse
import logging
import logging.handlers
import random
import sys
from pathlib import Path

from bracketengine.cli.tournament_display import (
    console,
    display_tournament_event,
    render_bracket,
)
from bracketengine.config import Config, TournamentEntry, load_config
from bracketengine.tournaments import BracketError, InMemoryStore, create_orchestrator
from bracketengine.tournaments.runner import make_winner_picker, simulate_tournament

# --------------------------------------------------------------------------- #
# Logging                                                                      #
# --------------------------------------------------------------------------- #

_LOG_FILE = Path("./logs/bracketengine.log")

logger = logging.getLogger("bracketengine")


def _setup_logging(verbose: bool) -> None:
    _LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        handlers=[
            console_handler,                                            # terminal
            logging.handlers.RotatingFileHandler(
                _LOG_FILE, maxBytes=2 * 1024 * 1024, backupCount=3,  # 2 MB × 3 files
                encoding="utf-8",
            ),
        ],
    )


def _run_entry(config: Config, entry: TournamentEntry) -> None:
    store = InMemoryStore()
    store.add_tournament(entry.settings, entry.participants)
    orchestrator = create_orchestrator(store, random_seed=config.simulation.random_seed)

    sim = config.simulation
    pick_winner = make_winner_picker(
        sim.winner_policy,
        seeds={p.id: p.seed for p in entry.participants},
        rng=random.Random(sim.random_seed),
        draw_rate=sim.draw_rate,
    )

    for event in simulate_tournament(orchestrator, entry.tournament_id, pick_winner):
        display_tournament_event(event)

    if entry.settings.format != "swiss":
        console.rule(f"[dim]Final bracket — {entry.settings.display_name}[/]", style="dim")
        render_bracket(orchestrator.get_bracket(entry.tournament_id), entry.settings.format)

    no_shows = [p for p, match_id in store.eliminations.get(entry.tournament_id, {}).items() if match_id is None]
    if no_shows:
        console.print(f"[dim]No-shows (not seeded): {', '.join(no_shows)}[/]")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Simulate configured tournaments.")
    parser.add_argument("config", nargs="?", default="config.yaml", help="path to config.yaml")
    parser.add_argument("--only", metavar="ID", help="run a single tournament by id")
    parser.add_argument("-v", "--verbose", action="store_true", help="log engine activity to the terminal")
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    try:
        config = load_config(args.config)
    except FileNotFoundError as exc:
        console.print(f"[red]Error:[/] {exc}")
        sys.exit(1)
    except ValueError as exc:
        console.print(f"[red]Config error:[/] {exc}")
        sys.exit(1)

    entries = config.tournaments
    if args.only:
        try:
            entries = [config.get(args.only)]
        except KeyError:
            console.print(f"[red]Error:[/] no tournament with id '{args.only}' in {args.config}")
            sys.exit(1)
    if not entries:
        console.print("[yellow]No tournaments configured.[/]")
        return

    for entry in entries:
        try:
            _run_entry(config, entry)
        except BracketError as exc:
            logger.error("Tournament %s failed: %s", entry.tournament_id, exc)
            console.print(f"[red]{entry.settings.display_name}:[/] {exc}")


if __name__ == "__main__":
    main()
