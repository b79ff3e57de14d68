"""
Pydantic models for earnings screenshot extraction.
"""

from datetime import date
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Storage widths of the records table (unsigned 64-bit won, 32-bit count)
AMOUNT_LIMIT = 2**64 - 1
COUNT_LIMIT = 2**32 - 1

# Longest text accepted from clients; OCR of one screenshot is far shorter
MAX_TEXT_LENGTH = 20_000


class Platform(str, Enum):
    """Delivery platforms with a known earnings screen. Order is tie-break priority."""
    BAEMIN = "baemin"
    COUPANG = "coupang"
    OTHER = "other"


class DefaultPolicy(str, Enum):
    """Named fallbacks an extraction may apply instead of failing."""
    PERIOD_DEFAULTED_TO_TODAY = "period_defaulted_to_today"
    DATE_CLAMPED_TO_TODAY = "date_clamped_to_today"
    RANGE_SWAPPED = "range_swapped"
    AMOUNT_ZERO_ON_NO_MATCH = "amount_zero_on_no_match"
    COUNT_ZERO_ON_NO_MATCH = "count_zero_on_no_match"
    AMOUNT_FROM_BREAKDOWN = "amount_from_breakdown"
    BREAKDOWN_TOTAL_MISMATCH = "breakdown_total_mismatch"


class SingleDay(BaseModel):
    """Receipt covering one business day."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["single_day"] = "single_day"
    date: date


class WeeklyRange(BaseModel):
    """Receipt covering a settlement range (usually one week)."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["weekly_range"] = "weekly_range"
    start: date
    end: date

    @model_validator(mode="after")
    def _check_order(self) -> "WeeklyRange":
        if self.start > self.end:
            raise ValueError(f"start {self.start} is after end {self.end}")
        return self

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


PeriodKind = Annotated[Union[SingleDay, WeeklyRange], Field(discriminator="kind")]


class DailyBreakdownEntry(BaseModel):
    """One day's figures on a weekly report."""
    model_config = ConfigDict(frozen=True)

    date: date
    amount: int = Field(ge=0, le=AMOUNT_LIMIT)
    delivery_count: Optional[int] = Field(default=None, ge=0, le=COUNT_LIMIT)


class ExtractionResult(BaseModel):
    """
    Structured result of one extraction call.

    `platform` is the caller's hint and decides which pattern set was used;
    `detected_platform` is the classifier's independent guess, kept for
    telemetry only.
    """
    model_config = ConfigDict(frozen=True)

    platform: Platform
    detected_platform: Platform = Platform.OTHER
    period: PeriodKind
    amount: int = Field(ge=0, le=AMOUNT_LIMIT)
    delivery_count: int = Field(ge=0, le=COUNT_LIMIT)
    confidence: float = Field(ge=0.0, le=1.0)
    breakdown: Optional[List[DailyBreakdownEntry]] = None
    raw_text: str
    defaults_applied: List[DefaultPolicy] = Field(default_factory=list)
    patterns_matched: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_weekly(self) -> bool:
        return isinstance(self.period, WeeklyRange)


class ValidationOutcome(BaseModel):
    """Pass/fail verdict plus advisory warnings for the UI."""
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    warnings: List[str] = Field(default_factory=list)


class AnalysisOutcome(BaseModel):
    """Everything the caller needs to accept, reject or reward an upload."""
    result: ExtractionResult
    validation: ValidationOutcome
    points_eligible: bool = False


class TextAnalysisRequest(BaseModel):
    """Request body for analyzing text that was already recognized."""
    text: str = Field(max_length=MAX_TEXT_LENGTH)
    platform: Platform = Platform.OTHER
    user_id: Optional[str] = None
