"""OpenSkill rating modules."""

from domain.ratings.openskill.calculator import (
    OpenSkillParameters,
    SquadOpenSkillCalculator,
    calculate_skill_score,
    validate_rating,
)

__all__ = [
    "OpenSkillParameters",
    "SquadOpenSkillCalculator",
    "calculate_skill_score",
    "validate_rating",
]
