"""GSC Connector — Row Join & Diff.

Pairs rows of two fetches with the same dimension set and produces one
ComparisonRecord per entity. An entity seen on only one side is compared
against a zero row.
"""

from typing import Dict, Iterable, List, Sequence, Tuple

from app.connectors.gsc.client import SearchConsoleAPIError
from app.core.logging import get_logger
from app.models.gsc_models import (
    ComparisonPolicy,
    ComparisonRecord,
    DateRange,
    QueryRow,
)

logger = get_logger("analyzer.comparison")

KEY_SEPARATOR = "\x1f"  # unit separator, never present in dimension values


def row_key(row: QueryRow) -> str:
    return KEY_SEPARATOR.join(row.keys)


def _index(rows: Iterable[QueryRow], width: int, side: str) -> Dict[str, QueryRow]:
    indexed: Dict[str, QueryRow] = {}
    for row in rows:
        if len(row.keys) != width:
            raise SearchConsoleAPIError(
                f"Unexpected response format: row {list(row.keys)} in range {side} "
                f"has {len(row.keys)} keys, expected {width}"
            )
        indexed[row_key(row)] = row
    return indexed


def join_rows(
    rows_a: Iterable[QueryRow],
    rows_b: Iterable[QueryRow],
    dimensions: Sequence[str],
    range_a: DateRange,
    range_b: DateRange,
    policy: ComparisonPolicy,
) -> List[ComparisonRecord]:
    """Build one record per RowKey found in either side, sorted by RowKey."""
    dims: Tuple[str, ...] = tuple(dimensions)
    side_a = _index(rows_a, len(dims), "A")
    side_b = _index(rows_b, len(dims), "B")

    records: List[ComparisonRecord] = []
    for key in sorted(side_a.keys() | side_b.keys()):
        a = side_a.get(key)
        b = side_b.get(key)
        keys = (a or b).keys
        a = a or QueryRow.zero(keys)
        b = b or QueryRow.zero(keys)
        records.append(
            ComparisonRecord(
                keys=keys,
                dimensions=dims,
                clicks_a=a.clicks,
                clicks_b=b.clicks,
                clicks_diff=a.clicks - b.clicks,
                impressions_a=a.impressions,
                impressions_b=b.impressions,
                impressions_diff=a.impressions - b.impressions,
                ctr_a=a.ctr,
                ctr_b=b.ctr,
                ctr_diff=a.ctr - b.ctr,
                position_a=a.position,
                position_b=b.position,
                position_diff=a.position - b.position,
                range_a=range_a,
                range_b=range_b,
                policy=policy,
            )
        )

    logger.info(
        f"Joined {len(side_a)} + {len(side_b)} rows into {len(records)} records",
        extra={"rows": len(records)},
    )
    return records
