"""Read-time display ranking of competitions and mixed match lists."""

from .priority import (
    AMBIGUOUS_PRIORITY,
    DEFAULT_PRIORITY,
    EUROPEAN_NIGHTS_OFFSET,
    YOUTH_PRIORITY,
    CompetitionLabel,
    competition_priority,
    has_continental,
    parse_competition_label,
    sort_matches,
)

__all__ = [
    "AMBIGUOUS_PRIORITY",
    "DEFAULT_PRIORITY",
    "EUROPEAN_NIGHTS_OFFSET",
    "YOUTH_PRIORITY",
    "CompetitionLabel",
    "competition_priority",
    "has_continental",
    "parse_competition_label",
    "sort_matches",
]
