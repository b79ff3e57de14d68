"""
Plausibility rules for extraction results.
"""

import logging
from typing import Dict, Optional

from pydantic import BaseModel

from riderscan.config import Settings, settings
from riderscan.models.earnings import DefaultPolicy, ExtractionResult, ValidationOutcome

logger = logging.getLogger(__name__)

NO_AMOUNT = "no amount detected"
NO_DELIVERY_COUNT = "no delivery count detected"
LOW_CONFIDENCE = "low recognition confidence, request clearer image"
AMOUNT_TOO_HIGH = "amount unusually high"
AMOUNT_TOO_LOW = "amount unusually low"
AVERAGE_OUT_OF_RANGE = "per-delivery average out of expected range"
COUNT_TOO_HIGH = "delivery count unusually high"

# Zero-on-no-match policies are already reported by the amount/count rules
DEFAULT_POLICY_WARNINGS: Dict[DefaultPolicy, str] = {
    DefaultPolicy.PERIOD_DEFAULTED_TO_TODAY: "no date detected, today's date was used",
    DefaultPolicy.DATE_CLAMPED_TO_TODAY: "date in the future was replaced with today's date",
    DefaultPolicy.RANGE_SWAPPED: "date range was out of order and has been swapped",
    DefaultPolicy.AMOUNT_FROM_BREAKDOWN: "total amount was computed from the daily breakdown",
    DefaultPolicy.BREAKDOWN_TOTAL_MISMATCH: "total amount does not match the daily breakdown",
}


class ValidationBounds(BaseModel):
    """All tunable validation thresholds, in won."""
    min_confidence: float = 0.7
    min_amount: int = 5_000
    max_amount: int = 1_000_000
    min_average_per_delivery: int = 2_000
    max_average_per_delivery: int = 15_000
    max_delivery_count: int = 100

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "ValidationBounds":
        return cls(
            min_confidence=config.MIN_CONFIDENCE,
            min_amount=config.MIN_AMOUNT,
            max_amount=config.MAX_AMOUNT,
            min_average_per_delivery=config.MIN_AVERAGE_PER_DELIVERY,
            max_average_per_delivery=config.MAX_AVERAGE_PER_DELIVERY,
            max_delivery_count=config.MAX_DELIVERY_COUNT,
        )


class ResultValidator:
    """
    Turn an ExtractionResult into a pass/fail verdict with warnings.

    Only a missing amount or a missing delivery count is fatal. Every other
    rule is advisory and surfaces as UI text.
    """

    def __init__(self, bounds: Optional[ValidationBounds] = None):
        self.bounds = ValidationBounds.from_settings() if bounds is None else bounds

    def validate(self, result: ExtractionResult) -> ValidationOutcome:
        bounds = self.bounds
        is_valid = True
        warnings = []

        if result.amount == 0:
            is_valid = False
            warnings.append(NO_AMOUNT)
        elif result.amount > bounds.max_amount:
            warnings.append(AMOUNT_TOO_HIGH)
        elif result.amount < bounds.min_amount:
            warnings.append(AMOUNT_TOO_LOW)

        if result.delivery_count == 0:
            is_valid = False
            warnings.append(NO_DELIVERY_COUNT)
        elif result.delivery_count > bounds.max_delivery_count:
            warnings.append(COUNT_TOO_HIGH)

        if result.confidence < bounds.min_confidence:
            warnings.append(LOW_CONFIDENCE)

        if result.amount > 0 and result.delivery_count > 0:
            average = result.amount / result.delivery_count
            if not bounds.min_average_per_delivery <= average <= bounds.max_average_per_delivery:
                warnings.append(AVERAGE_OUT_OF_RANGE)

        for policy in result.defaults_applied:
            message = DEFAULT_POLICY_WARNINGS.get(policy)
            if message and message not in warnings:
                warnings.append(message)

        if not is_valid or warnings:
            logger.debug("Validation finished", extra={
                "is_valid": is_valid,
                "warnings": warnings,
            })
        return ValidationOutcome(is_valid=is_valid, warnings=warnings)
