"""GSC Connector — Dimension Filter Groups.

Shapes user-entered filters into ``dimensionFilterGroups``.

Search Console ANDs every filter and every group it receives, so OR can
only be expressed inside a single filter: the values are merged into one
``includingRegex`` alternation.
"""

import re
from typing import Any, Dict, List, Optional, Sequence

from app.core.errors import InputValidationError
from app.models.gsc_models import DimensionFilter, FilterOperator

GROUP_TYPES = ("and", "or")

_NEGATED = (
    FilterOperator.NOT_EQUALS,
    FilterOperator.NOT_CONTAINS,
    FilterOperator.EXCLUDING_REGEX,
)


def _values(f: DimensionFilter) -> List[str]:
    return [v.strip() for v in f.expression.split(",") if v.strip()]


def _entry(f: DimensionFilter, operator: FilterOperator, expression: str) -> Dict[str, str]:
    return {
        "dimension": f.dimension.value,
        "operator": operator.value,
        "expression": expression,
    }


def _any_of(f: DimensionFilter, values: List[str]) -> Dict[str, str]:
    """One filter matching any of ``values`` under the filter's operator."""
    if len(values) == 1:
        return _entry(f, f.operator, values[0])
    if f.operator in _NEGATED:
        raise InputValidationError(
            f"Filter on {f.dimension.value!r}: {f.operator.value} cannot be "
            "combined with 'or' across several values"
        )
    if f.operator == FilterOperator.EQUALS:
        pattern = "^(?:" + "|".join(re.escape(v) for v in values) + ")$"
    elif f.operator == FilterOperator.CONTAINS:
        pattern = "|".join(re.escape(v) for v in values)
    else:
        pattern = "|".join(f"(?:{v})" for v in values)
    return _entry(f, FilterOperator.INCLUDING_REGEX, pattern)


def _all_of(f: DimensionFilter, values: List[str]) -> List[Dict[str, str]]:
    """One filter per value; every value must hold."""
    if f.operator == FilterOperator.EQUALS and len(set(values)) > 1:
        raise InputValidationError(
            f"Filter on {f.dimension.value!r} can never match: a value cannot "
            "equal several different expressions (use group type 'or')"
        )
    return [_entry(f, f.operator, v) for v in dict.fromkeys(values)]


def build_filter_groups(
    filters: Sequence[DimensionFilter],
    group_type: str = "and",
) -> Optional[List[Dict[str, Any]]]:
    """Return ``dimensionFilterGroups`` or None when there is nothing to filter.

    ``group_type`` decides how the comma-separated values of one filter
    combine: "and" requires all of them, "or" any of them. Separate
    filters are always ANDed.
    """
    group_type = group_type.lower()
    if group_type not in GROUP_TYPES:
        raise InputValidationError(f"Unknown filter group type: {group_type!r}")

    entries: List[Dict[str, str]] = []
    for f in filters:
        values = _values(f)
        if not values:
            continue
        if group_type == "or":
            entries.append(_any_of(f, values))
        else:
            entries.extend(_all_of(f, values))

    if not entries:
        return None
    return [{"groupType": "and", "filters": entries}]
