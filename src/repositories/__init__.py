"""Database repository helpers."""

from repositories.battle_repository import (
    SessionBattleSource,
    apply_battle_resolution,
    fetch_defensive_battles,
    fetch_offensive_battles,
    fetch_unprocessed_battles,
    insert_battle_results,
)
from repositories.squad_repository import (
    create_squad,
    ensure_squad_schema,
    get_active_squad,
    get_squad,
    list_squads,
    ranked_skills,
    save_squad_snapshot,
    search_squads,
)

__all__ = [
    "SessionBattleSource",
    "apply_battle_resolution",
    "create_squad",
    "ensure_squad_schema",
    "fetch_defensive_battles",
    "fetch_offensive_battles",
    "fetch_unprocessed_battles",
    "get_active_squad",
    "get_squad",
    "insert_battle_results",
    "list_squads",
    "ranked_skills",
    "save_squad_snapshot",
    "search_squads",
]
