"""Static reference tables — role configuration and technology suggestions."""

from quote_engine.knowledge.roles import (
    LEVEL_ORDER,
    ROLE_CONFIG,
    SENIORITY_MULTIPLIERS,
    RoleConfig,
    find_role,
    level_rank,
    role_key_for,
)
from quote_engine.knowledge.tech_suggestions import (
    TECH_SUGGESTIONS,
    RoleSuggestion,
    suggestions_for,
)

__all__ = [
    "LEVEL_ORDER",
    "ROLE_CONFIG",
    "SENIORITY_MULTIPLIERS",
    "RoleConfig",
    "find_role",
    "level_rank",
    "role_key_for",
    "TECH_SUGGESTIONS",
    "RoleSuggestion",
    "suggestions_for",
]
