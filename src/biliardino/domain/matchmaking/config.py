"""Load matchmaking weights from TOML files."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from biliardino.domain.config_base import BaseSystemConfig, load_system_config, parse_system_header


@dataclass(frozen=True)
class MatchmakingParameters:
    match_balance_weight: float = 0.35
    team_balance_weight: float = 0.15
    priority_weight: float = 0.15
    diversity_weight: float = 0.35
    randomness: float = 0.15


@dataclass(frozen=True)
class MatchmakingConfig(BaseSystemConfig):
    """Configuration for one matchmaking season."""

    parameters: MatchmakingParameters

    def as_config_json(self) -> dict[str, Any]:
        return {item.name: getattr(self.parameters, item.name) for item in fields(self.parameters)}


def load_matchmaking_config(file_path: Path) -> MatchmakingConfig:
    """Load and validate one matchmaking TOML file."""
    return load_system_config(file_path, _parse_matchmaking_config)


def _parse_matchmaking_config(raw: dict[str, Any], file_path: Path) -> MatchmakingConfig:
    name, description = parse_system_header(raw, file_path)
    matchmaking_raw = raw.get("matchmaking", {})

    parameters = MatchmakingParameters(
        match_balance_weight=float(matchmaking_raw.get("match_balance_weight", 0.35)),
        team_balance_weight=float(matchmaking_raw.get("team_balance_weight", 0.15)),
        priority_weight=float(matchmaking_raw.get("priority_weight", 0.15)),
        diversity_weight=float(matchmaking_raw.get("diversity_weight", 0.35)),
        randomness=float(matchmaking_raw.get("randomness", 0.15)),
    )
    for item in fields(parameters):
        value = getattr(parameters, item.name)
        if value < 0.0 or value > 1.0:
            raise ValueError(f"{file_path}: [matchmaking].{item.name} must be between 0 and 1")

    return MatchmakingConfig(
        name=name,
        description=description,
        file_path=file_path,
        parameters=parameters,
    )
