"""Load Elo system definitions from TOML files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from biliardino.domain.config_base import (
    BaseSystemConfig,
    load_system_config,
    parse_system_header,
)
from biliardino.domain.elo.calculator import EloParameters


@dataclass(frozen=True)
class EloSystemConfig(BaseSystemConfig):
    """Configuration for one Elo system."""

    parameters: EloParameters

    def as_config_json(self) -> dict[str, Any]:
        return {
            "initial_elo": self.parameters.initial_elo,
            "k_factor": self.parameters.k_factor,
            "scale_factor": self.parameters.scale_factor,
            "rating_multiplier": self.parameters.rating_multiplier,
            "role_penalty": self.parameters.role_penalty,
            "margin_span": self.parameters.margin_span,
            "margin_weight": self.parameters.margin_weight,
            "min_winning_goals": self.parameters.min_winning_goals,
        }


def load_elo_system_config(file_path: Path) -> EloSystemConfig:
    """Load and validate one Elo system TOML file."""
    return load_system_config(file_path, _parse_elo_system_config)


def _parse_elo_system_config(raw: dict[str, Any], file_path: Path) -> EloSystemConfig:
    name, description = parse_system_header(raw, file_path)
    elo_raw = raw.get("elo", {})

    parameters = EloParameters(
        initial_elo=float(elo_raw.get("initial_elo", 1000.0)),
        k_factor=float(elo_raw.get("k_factor", 50.0)),
        scale_factor=float(elo_raw.get("scale_factor", 400.0)),
        rating_multiplier=float(elo_raw.get("rating_multiplier", 2.0)),
        role_penalty=float(elo_raw.get("role_penalty", 100.0)),
        margin_span=float(elo_raw.get("margin_span", 7.0)),
        margin_weight=float(elo_raw.get("margin_weight", 0.5)),
        min_winning_goals=int(elo_raw.get("min_winning_goals", 8)),
    )
    _validate_parameters(file_path=file_path, parameters=parameters)

    return EloSystemConfig(
        name=name,
        description=description,
        file_path=file_path,
        parameters=parameters,
    )


def _validate_parameters(*, file_path: Path, parameters: EloParameters) -> None:
    if parameters.initial_elo <= 0.0:
        raise ValueError(f"{file_path}: [elo].initial_elo must be > 0")
    if parameters.k_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].k_factor must be > 0")
    if parameters.scale_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].scale_factor must be > 0")
    if parameters.rating_multiplier <= 0.0:
        raise ValueError(f"{file_path}: [elo].rating_multiplier must be > 0")
    if parameters.role_penalty < 0.0:
        raise ValueError(f"{file_path}: [elo].role_penalty must be >= 0")
    if parameters.margin_span <= 0.0:
        raise ValueError(f"{file_path}: [elo].margin_span must be > 0")
    if parameters.margin_weight < 0.0:
        raise ValueError(f"{file_path}: [elo].margin_weight must be >= 0")
    if parameters.min_winning_goals < 0:
        raise ValueError(f"{file_path}: [elo].min_winning_goals must be >= 0")
