"""GSC Connector — Date Range Builder.

Resolves preset ranges ("last 7 days", "last 3 months", ...) and derives
the second range of a two-period comparison. The current date is always
passed in; nothing here reads the clock.
"""

from datetime import date, datetime, timedelta
from typing import Any, Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from app.core.errors import InputValidationError
from app.core.logging import get_logger
from app.models.gsc_models import ComparisonPolicy, CustomRange, DateRange, RangeMode

logger = get_logger("analyzer.date_ranges")

DateInput = Any

DEFAULT_CUSTOM_DAYS = 28

PRESET_OFFSETS = {
    RangeMode.LAST_7D: relativedelta(days=7),
    RangeMode.LAST_28D: relativedelta(days=28),
    RangeMode.LAST_3MO: relativedelta(months=3),
    RangeMode.LAST_12MO: relativedelta(months=12),
}


def parse_date(value: DateInput) -> Optional[date]:
    """Parse a picker value into a calendar date, or None if unusable.

    Accepts ``date``/``datetime`` objects and ISO-8601 strings with or
    without a time-of-day part (which is dropped).
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        logger.warning(f"Ignoring non-text date {value!r}")
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        logger.warning(f"Ignoring unparseable date {text!r}")
        return None


def _coerce_mode(mode: Union[RangeMode, str]) -> RangeMode:
    try:
        return RangeMode(mode)
    except ValueError:
        raise InputValidationError(f"Unknown date range mode: {mode!r}") from None


def resolve_range(
    mode: Union[RangeMode, str],
    today: date,
    custom_start: DateInput = None,
    custom_end: DateInput = None,
) -> DateRange:
    """Turn a preset or custom selection into a concrete DateRange."""
    mode = _coerce_mode(mode)

    if mode != RangeMode.CUSTOM:
        return DateRange(start_date=today - PRESET_OFFSETS[mode], end_date=today)

    end = parse_date(custom_end) or today
    start = parse_date(custom_start) or end - timedelta(days=DEFAULT_CUSTOM_DAYS)
    if start > end:
        start, end = end, start
    return DateRange(start_date=start, end_date=end)


def build_comparison_range(
    policy: Union[ComparisonPolicy, str],
    range_a: DateRange,
    today: date,
    custom_b: Optional[CustomRange] = None,
) -> Tuple[DateRange, DateRange]:
    """Derive the comparison range B for a primary range A."""
    try:
        policy = ComparisonPolicy(policy)
    except ValueError:
        raise InputValidationError(f"Unknown comparison policy: {policy!r}") from None

    if policy == ComparisonPolicy.PREVIOUS_PERIOD:
        end_b = range_a.start_date - timedelta(days=1)
        start_b = end_b - timedelta(days=range_a.days - 1)
        range_b = DateRange(start_date=start_b, end_date=end_b)

    elif policy == ComparisonPolicy.PREVIOUS_YEAR:
        # relativedelta clamps Feb 29 to Feb 28
        range_b = DateRange(
            start_date=range_a.start_date - relativedelta(years=1),
            end_date=range_a.end_date - relativedelta(years=1),
        )
        if range_b.days != range_a.days:
            logger.warning(
                f"Previous-year range {range_b.start_date}..{range_b.end_date} "
                f"is {range_b.days} days, primary range is {range_a.days}"
            )

    else:
        custom_b = custom_b or CustomRange()
        range_b = resolve_range(
            custom_b.mode, today, custom_b.start_date, custom_b.end_date
        )

    return range_a, range_b
