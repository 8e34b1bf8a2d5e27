"""
Configuration loading from config.yaml.

Uses typed dataclasses throughout so the rest of the app gets IDE
completion and type-checker support without touching raw dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import get_args

import yaml

from bracketengine.tournaments.base import (
    Participant,
    SwissRules,
    TournamentFormat,
    TournamentSettings,
)
from bracketengine.tournaments.runner import WinnerPolicy


@dataclass
class SimulationConfig:
    winner_policy: WinnerPolicy = "seed"
    draw_rate: float = 0.0          # Swiss only; chance a simulated match is drawn
    random_seed: int | None = None  # fixes Swiss round-1 shuffles and coin flips


@dataclass
class TournamentEntry:
    settings: TournamentSettings
    participants: list[Participant]   # seed order

    @property
    def tournament_id(self) -> str:
        return self.settings.tournament_id


@dataclass
class Config:
    tournaments: list[TournamentEntry] = field(default_factory=list)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)

    def get(self, tournament_id: str) -> TournamentEntry:
        for entry in self.tournaments:
            if entry.tournament_id == tournament_id:
                return entry
        raise KeyError(tournament_id)


def load_config(path: str | Path = "config.yaml") -> Config:
    """
    Load and validate config.yaml.

    Raises:
        FileNotFoundError: config.yaml is missing.
        ValueError: required fields are absent or invalid.
    """
    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {cfg_path.resolve()}\n"
            "Copy config.example.yaml to config.yaml and describe your tournaments."
        )

    with cfg_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return parse_config(raw)


def parse_config(raw: dict) -> Config:
    """Build a validated Config from an already-parsed YAML mapping."""
    try:
        sim_raw = raw.get("simulation") or {}
        random_seed = sim_raw.get("random_seed")
        simulation = SimulationConfig(
            winner_policy=sim_raw.get("winner_policy", "seed"),
            draw_rate=float(sim_raw.get("draw_rate", 0.0)),
            random_seed=int(random_seed) if random_seed is not None else None,
        )

        tournaments: list[TournamentEntry] = []
        for t_raw in raw.get("tournaments") or []:
            rules_raw = t_raw.get("rules") or {}
            settings = TournamentSettings(
                tournament_id=str(t_raw["id"]),
                name=str(t_raw.get("name", "")),
                format=t_raw["format"],
                min_participants=int(t_raw.get("min_participants", 2)),
                max_participants=int(t_raw.get("max_participants", 256)),
                rules=SwissRules(
                    num_rounds=int(rules_raw.get("num_rounds", 5)),
                    points_for_win=float(rules_raw.get("points_for_win", 1.0)),
                    points_for_draw=float(rules_raw.get("points_for_draw", 0.5)),
                    points_for_loss=float(rules_raw.get("points_for_loss", 0.0)),
                    points_for_bye=float(rules_raw.get("points_for_bye", 1.0)),
                ),
            )
            participants = [
                _parse_participant(p_raw, seed)
                for seed, p_raw in enumerate(t_raw.get("participants") or [], 1)
            ]
            tournaments.append(TournamentEntry(settings=settings, participants=participants))

        config = Config(tournaments=tournaments, simulation=simulation)
        _validate(config)
        return config

    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Invalid config.yaml structure: {exc}") from exc


def _parse_participant(value: object, seed: int) -> Participant:
    # Either a bare id or {id, checked_in}
    if isinstance(value, dict):
        return Participant(
            id=str(value["id"]),
            seed=seed,
            checked_in=bool(value.get("checked_in", True)),
        )
    return Participant(id=str(value), seed=seed)


def _validate(config: Config) -> None:
    valid_formats = get_args(TournamentFormat)
    valid_policies = get_args(WinnerPolicy)
    if config.simulation.winner_policy not in valid_policies:
        raise ValueError(
            f"simulation.winner_policy must be one of {valid_policies}, "
            f"got '{config.simulation.winner_policy}'"
        )
    if not 0.0 <= config.simulation.draw_rate <= 1.0:
        raise ValueError("simulation.draw_rate must be between 0 and 1")

    seen_ids: set[str] = set()
    for entry in config.tournaments:
        s = entry.settings
        if s.tournament_id in seen_ids:
            raise ValueError(f"Duplicate tournament id '{s.tournament_id}'")
        seen_ids.add(s.tournament_id)
        if s.format not in valid_formats:
            raise ValueError(
                f"tournament '{s.tournament_id}': format must be one of {valid_formats}, got '{s.format}'"
            )
        if s.min_participants < 2:
            raise ValueError(f"tournament '{s.tournament_id}': min_participants must be >= 2")
        if s.max_participants < s.min_participants:
            raise ValueError(
                f"tournament '{s.tournament_id}': max_participants must be >= min_participants"
            )
        if s.rules.num_rounds < 1:
            raise ValueError(f"tournament '{s.tournament_id}': rules.num_rounds must be >= 1")
        ids = [p.id for p in entry.participants]
        if len(ids) != len(set(ids)):
            raise ValueError(f"tournament '{s.tournament_id}': participant ids must be unique")
