"""GSC Connector — Search Console Data Models."""

from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

from app.config import settings


# ─────────────────────────────────────────────
# ENUMS — Values accepted by the remote API / operations
# ─────────────────────────────────────────────


class RangeMode(str, Enum):
    """Date range presets."""

    LAST_7D = "last7d"
    LAST_28D = "last28d"
    LAST_3MO = "last3mo"
    LAST_12MO = "last12mo"
    CUSTOM = "custom"


class ComparisonPolicy(str, Enum):
    """How the comparison range is derived from the primary range."""

    PREVIOUS_PERIOD = "previousPeriod"
    PREVIOUS_YEAR = "previousYear"
    CUSTOM = "custom"


class Dimension(str, Enum):
    PAGE = "page"
    QUERY = "query"
    COUNTRY = "country"
    DEVICE = "device"
    DATE = "date"
    SEARCH_APPEARANCE = "searchAppearance"


class SearchType(str, Enum):
    WEB = "web"
    IMAGE = "image"
    VIDEO = "video"
    NEWS = "news"
    DISCOVER = "discover"
    GOOGLE_NEWS = "googleNews"


class FilterOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    INCLUDING_REGEX = "includingRegex"
    EXCLUDING_REGEX = "excludingRegex"


METRIC_NAMES = ("clicks", "impressions", "ctr", "position")


# ─────────────────────────────────────────────
# REMOTE DATA — As returned by Search Console
# ─────────────────────────────────────────────


class QueryRow(BaseModel):
    """One searchAnalytics row. Immutable once received."""

    keys: Tuple[str, ...] = ()
    clicks: int = Field(default=0, ge=0)
    impressions: int = Field(default=0, ge=0)
    ctr: float = Field(default=0.0, ge=0.0, le=1.0)
    position: float = Field(default=0.0, ge=0.0)
    """Average rank, >= 1 for real rows. 0 only on synthetic zero rows."""

    model_config = {"frozen": True}

    @classmethod
    def zero(cls, keys: Tuple[str, ...]) -> "QueryRow":
        """Placeholder for an entity missing from one side of a comparison."""
        return cls(keys=keys)


class SiteEntry(BaseModel):
    """A property the authenticated account can see."""

    siteUrl: str
    permissionLevel: str = ""


class DateRange(BaseModel):
    """Inclusive calendar range, serialized as YYYY-MM-DD."""

    start_date: date
    end_date: date

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_order(self) -> "DateRange":
        if self.start_date > self.end_date:
            raise ValueError(
                f"start_date {self.start_date} is after end_date {self.end_date}"
            )
        return self

    @property
    def days(self) -> int:
        """Length of the range, counting both ends."""
        return (self.end_date - self.start_date).days + 1

    def as_body(self) -> Dict[str, str]:
        """Fragment of a searchAnalytics.query request body."""
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
        }


class ComparisonRecord(BaseModel):
    """One entity's metrics across two ranges. Diff fields are a - b."""

    keys: Tuple[str, ...]
    dimensions: Tuple[str, ...]
    clicks_a: int = 0
    clicks_b: int = 0
    clicks_diff: int = 0
    impressions_a: int = 0
    impressions_b: int = 0
    impressions_diff: int = 0
    ctr_a: float = 0.0
    ctr_b: float = 0.0
    ctr_diff: float = 0.0
    position_a: float = 0.0
    position_b: float = 0.0
    position_diff: float = 0.0
    range_a: DateRange
    range_b: DateRange
    policy: ComparisonPolicy

    model_config = {"frozen": True}

    def to_row(self) -> Dict[str, Any]:
        """Flatten into an output row keyed by dimension name."""
        row: Dict[str, Any] = dict(zip(self.dimensions, self.keys))
        row["keys"] = list(self.keys)
        for metric in METRIC_NAMES:
            for suffix in ("a", "b", "diff"):
                field = f"{metric}_{suffix}"
                row[field] = getattr(self, field)
        row["rangeA"] = self.range_a.as_body()
        row["rangeB"] = self.range_b.as_body()
        row["comparisonPolicy"] = self.policy.value
        return row


# ─────────────────────────────────────────────
# OPERATION PARAMETERS — One set per input item
# ─────────────────────────────────────────────


class DimensionFilter(BaseModel):
    """A dimension filter as entered by the user.

    ``expression`` may hold several comma-separated values.
    """

    dimension: Dimension
    operator: FilterOperator = FilterOperator.EQUALS
    expression: str


class CustomRange(BaseModel):
    mode: RangeMode = RangeMode.CUSTOM
    start_date: Any = None
    end_date: Any = None


class PageInsightsParams(BaseModel):
    """Parameters of site/getPageInsights."""

    site_url: str
    range_mode: RangeMode = RangeMode.LAST_28D
    start_date: Any = None
    """Only read when range_mode is custom. Unparseable values fall back."""
    end_date: Any = None
    dimensions: List[Dimension] = [Dimension.PAGE]
    row_limit: int = Field(default=settings.default_row_limit, ge=1)
    page_size: Optional[int] = None
    search_type: SearchType = SearchType.WEB
    filters: List[DimensionFilter] = []
    filter_group_type: str = "and"

    @model_validator(mode="after")
    def check_dimensions(self) -> "PageInsightsParams":
        if not self.dimensions:
            raise ValueError("at least one dimension must be selected")
        if len(set(self.dimensions)) != len(self.dimensions):
            raise ValueError("dimensions must not repeat")
        return self


class ComparePeriodsParams(PageInsightsParams):
    """Parameters of site/comparePeriods."""

    comparison_policy: ComparisonPolicy = ComparisonPolicy.PREVIOUS_PERIOD
    custom_b: Optional[CustomRange] = None


class InspectUrlParams(BaseModel):
    """Parameters of url/inspect."""

    site_url: str
    inspection_url: str
    language_code: Optional[str] = None


class OperationItem(BaseModel):
    """One input item handed to the execution harness."""

    resource: str = "site"
    operation: str = "getSites"
    parameters: Dict[str, Any] = {}
