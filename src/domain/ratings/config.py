"""Load squad rating system definitions from TOML files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from domain.config_base import BaseSystemConfig, load_system_config, load_system_configs, parse_bool
from domain.ratings.openskill.calculator import OpenSkillParameters, SquadOpenSkillCalculator
from domain.ratings.ranking import RankClassifier, RankingParameters


@dataclass(frozen=True)
class SquadRatingConfig(BaseSystemConfig):
    """Every constant the rating core needs, versioned together in one file."""

    parameters: OpenSkillParameters
    ranking: RankingParameters

    @property
    def sigma_multiplier(self) -> float:
        return self.parameters.sigma_multiplier

    @property
    def win_threshold(self) -> int:
        return self.ranking.win_threshold

    @property
    def deviation_floor(self) -> float:
        return self.parameters.deviation_floor

    def create_calculator(self) -> SquadOpenSkillCalculator:
        return SquadOpenSkillCalculator(self.parameters)

    def create_classifier(self) -> RankClassifier:
        return RankClassifier(self.ranking)

    def as_config_json(self) -> dict[str, Any]:
        return {
            "initial_mu": self.parameters.initial_mu,
            "initial_sigma": self.parameters.initial_sigma,
            "beta": self.parameters.beta,
            "kappa": self.parameters.kappa,
            "tau": self.parameters.tau,
            "limit_sigma": self.parameters.limit_sigma,
            "balance": self.parameters.balance,
            "sigma_multiplier": self.parameters.sigma_multiplier,
            "deviation_floor": self.parameters.deviation_floor,
            "win_threshold": self.ranking.win_threshold,
            "tier_cutoffs": list(self.ranking.tier_cutoffs),
        }


def load_squad_rating_configs(config_dir: Path) -> list[SquadRatingConfig]:
    """Load and validate all squad rating TOML config files in a directory."""
    return load_system_configs(config_dir, _parse_config, duplicate_name_label="squad rating")


def load_squad_rating_config(file_path: Path) -> SquadRatingConfig:
    """Load and validate a single squad rating TOML config file."""
    return load_system_config(file_path, _parse_config)


def _parse_config(raw: dict[str, Any], file_path: Path) -> SquadRatingConfig:
    system_raw = raw.get("system", {})
    openskill_raw = raw.get("openskill", {})
    ranking_raw = raw.get("ranking", {})

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")

    description_value = system_raw.get("description")
    description = None if description_value is None else str(description_value)

    defaults = OpenSkillParameters()
    parameters = OpenSkillParameters(
        initial_mu=float(openskill_raw.get("initial_mu", defaults.initial_mu)),
        initial_sigma=float(openskill_raw.get("initial_sigma", defaults.initial_sigma)),
        beta=float(openskill_raw.get("beta", defaults.beta)),
        kappa=float(openskill_raw.get("kappa", defaults.kappa)),
        tau=float(openskill_raw.get("tau", defaults.tau)),
        limit_sigma=parse_bool(
            openskill_raw.get("limit_sigma", defaults.limit_sigma),
            file_path=file_path,
            key="[openskill].limit_sigma",
        ),
        balance=parse_bool(
            openskill_raw.get("balance", defaults.balance),
            file_path=file_path,
            key="[openskill].balance",
        ),
        sigma_multiplier=float(openskill_raw.get("sigma_multiplier", defaults.sigma_multiplier)),
        deviation_floor=float(openskill_raw.get("deviation_floor", defaults.deviation_floor)),
    )
    _validate_parameters(file_path=file_path, parameters=parameters)

    ranking_defaults = RankingParameters()
    cutoffs_raw = ranking_raw.get("tier_cutoffs", list(ranking_defaults.tier_cutoffs))
    if not isinstance(cutoffs_raw, list):
        raise ValueError(f"{file_path}: [ranking].tier_cutoffs must be a list of numbers")
    ranking = RankingParameters(
        win_threshold=int(ranking_raw.get("win_threshold", ranking_defaults.win_threshold)),
        tier_cutoffs=tuple(float(value) for value in cutoffs_raw),
    )
    _validate_ranking(file_path=file_path, ranking=ranking)

    return SquadRatingConfig(
        name=name,
        description=description,
        file_path=file_path,
        parameters=parameters,
        ranking=ranking,
    )


def _validate_parameters(*, file_path: Path, parameters: OpenSkillParameters) -> None:
    if parameters.initial_mu <= 0.0:
        raise ValueError(f"{file_path}: [openskill].initial_mu must be > 0")
    if parameters.initial_sigma <= 0.0:
        raise ValueError(f"{file_path}: [openskill].initial_sigma must be > 0")
    if parameters.beta <= 0.0:
        raise ValueError(f"{file_path}: [openskill].beta must be > 0")
    if parameters.kappa <= 0.0:
        raise ValueError(f"{file_path}: [openskill].kappa must be > 0")
    if parameters.tau <= 0.0:
        raise ValueError(f"{file_path}: [openskill].tau must be > 0")
    if parameters.sigma_multiplier < 0.0:
        raise ValueError(f"{file_path}: [openskill].sigma_multiplier must be >= 0")
    if parameters.deviation_floor <= 0.0:
        raise ValueError(f"{file_path}: [openskill].deviation_floor must be > 0")
    if parameters.deviation_floor >= parameters.initial_sigma:
        raise ValueError(f"{file_path}: [openskill].deviation_floor must be < initial_sigma")


def _validate_ranking(*, file_path: Path, ranking: RankingParameters) -> None:
    if ranking.win_threshold < 1:
        raise ValueError(f"{file_path}: [ranking].win_threshold must be >= 1")
    cutoffs = ranking.tier_cutoffs
    for higher, lower in zip(cutoffs, cutoffs[1:]):
        if lower >= higher:
            raise ValueError(f"{file_path}: [ranking].tier_cutoffs must be strictly descending")


__all__ = ["SquadRatingConfig", "load_squad_rating_config", "load_squad_rating_configs"]
