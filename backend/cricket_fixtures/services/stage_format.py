"""
Stage format normalization.

Stages carry two free-text fields (format and stage_type). Every generator
dispatch goes through normalize_stage_format so there is exactly one place
that decides which pairing algorithm a stage uses.
"""

from enum import Enum
from typing import Optional


class StageFormat(str, Enum):
    SINGLE_ROUND_ROBIN = "single_round_robin"
    DOUBLE_ROUND_ROBIN = "double_round_robin"
    SINGLE_ELIMINATION = "single_elimination"
    DOUBLE_ELIMINATION = "double_elimination"
    SWISS = "swiss"


ELIMINATION_FORMATS = frozenset({StageFormat.SINGLE_ELIMINATION, StageFormat.DOUBLE_ELIMINATION})

_EXPLICIT_FORMATS = {
    "single_round_robin": StageFormat.SINGLE_ROUND_ROBIN,
    "round_robin": StageFormat.SINGLE_ROUND_ROBIN,
    "double_round_robin": StageFormat.DOUBLE_ROUND_ROBIN,
    "single_elimination": StageFormat.SINGLE_ELIMINATION,
    "double_elimination": StageFormat.DOUBLE_ELIMINATION,
    "swiss": StageFormat.SWISS,
}

_FORMATS_BY_STAGE_TYPE = {
    "league": StageFormat.SINGLE_ROUND_ROBIN,
    "group": StageFormat.SINGLE_ROUND_ROBIN,
    "knockout": StageFormat.SINGLE_ELIMINATION,
    "playoff": StageFormat.SINGLE_ELIMINATION,
    "swiss": StageFormat.SWISS,
}


def _normalize_key(s: Optional[str]) -> str:
    return (s or "").strip().lower().replace(" ", "_").replace("-", "_")


def normalize_stage_format(format: Optional[str], stage_type: Optional[str]) -> StageFormat:
    """
    Map a stage's format/stage_type pair to one canonical StageFormat.

    Order:
    1. Explicit format string
    2. "custom" format: knockout -> single elimination, anything else -> round robin
    3. Inferred from stage_type
    4. Fallback: single round robin (unrecognized input is not an error)
    """
    format_key = _normalize_key(format)
    stage_type_key = _normalize_key(stage_type)

    if format_key in _EXPLICIT_FORMATS:
        return _EXPLICIT_FORMATS[format_key]

    if format_key == "custom":
        if stage_type_key == "knockout":
            return StageFormat.SINGLE_ELIMINATION
        return StageFormat.SINGLE_ROUND_ROBIN

    return _FORMATS_BY_STAGE_TYPE.get(stage_type_key, StageFormat.SINGLE_ROUND_ROBIN)
