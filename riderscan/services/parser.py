"""
Earnings screenshot parser.

Runs the extraction pipeline over recognized text:

    classify -> period -> amount/count -> breakdown (weekly only) -> score

Each stage is a separate, stateless component so the parser itself holds no
state between calls and may be shared across requests.
"""

import logging
import unicodedata
from typing import Dict, List, Optional, Tuple

from riderscan.models.earnings import (
    AMOUNT_LIMIT,
    COUNT_LIMIT,
    AnalysisOutcome,
    DailyBreakdownEntry,
    DefaultPolicy,
    ExtractionResult,
    Platform,
    SingleDay,
    WeeklyRange,
)
from riderscan.services.amounts import ANCHOR, AmountCountExtractor
from riderscan.services.breakdown import DailyBreakdownExtractor
from riderscan.services.classifier import PlatformClassifier
from riderscan.services.period import PeriodExtractor, note_default
from riderscan.services.validator import ResultValidator
from riderscan.utils.clock import BusinessClock, SystemBusinessClock
from riderscan.utils.scoring import ConfidenceScorer

logger = logging.getLogger(__name__)


def normalize_text(text: str) -> str:
    """
    Normalize OCR text before matching.

    NFKC folds full-width digits and punctuation ("１２，５００원") into their
    ASCII forms; line endings become "\\n".
    """
    if not text:
        return ""
    normalized = unicodedata.normalize('NFKC', text)
    return normalized.replace('\r\n', '\n').replace('\r', '\n')


class EarningsParser:
    """Extract earnings from one screenshot's text."""

    def __init__(
        self,
        classifier: Optional[PlatformClassifier] = None,
        period_extractor: Optional[PeriodExtractor] = None,
        amount_extractor: Optional[AmountCountExtractor] = None,
        breakdown_extractor: Optional[DailyBreakdownExtractor] = None,
        scorer: Optional[ConfidenceScorer] = None,
        validator: Optional[ResultValidator] = None,
        clock: Optional[BusinessClock] = None,
    ):
        self.classifier = classifier or PlatformClassifier()
        self.period_extractor = period_extractor or PeriodExtractor()
        self.amount_extractor = amount_extractor or AmountCountExtractor()
        self.breakdown_extractor = breakdown_extractor or DailyBreakdownExtractor()
        self.scorer = scorer or ConfidenceScorer()
        self.validator = validator or ResultValidator()
        self.clock = clock or SystemBusinessClock()

    def parse(self, text: str, platform_hint: Platform = Platform.OTHER) -> ExtractionResult:
        """
        Parse recognized text into an ExtractionResult.

        The rider's platform choice routes every extractor. The classifier
        runs independently and only its disagreement is logged.

        Args:
            text: Full OCR text of one screenshot
            platform_hint: Platform selected by the rider

        Returns:
            ExtractionResult; never raises on malformed text
        """
        raw_text = text or ""
        working = normalize_text(raw_text)
        _debug = {
            'patterns_matched': {},
            'defaults_applied': [],
        }

        detected = self.classifier.classify(working)
        if detected != platform_hint:
            logger.info("Detected platform differs from selection", extra={
                "platform_hint": platform_hint.value,
                "detected_platform": detected.value,
            })

        period = self.period_extractor.extract_period(working, platform_hint, self.clock, _debug)
        amount = self.amount_extractor.extract_amount(working, platform_hint, _debug)
        delivery_count = self.amount_extractor.extract_count(working, platform_hint, _debug)

        breakdown = None
        if isinstance(period, WeeklyRange):
            breakdown = self.breakdown_extractor.extract_breakdown(working, platform_hint, period, _debug)
            amount, delivery_count = self._reconcile(amount, delivery_count, breakdown, _debug)

        confidence = self.scorer.score(working, platform_hint)

        result = ExtractionResult(
            platform=platform_hint,
            detected_platform=detected,
            period=period,
            amount=amount,
            delivery_count=delivery_count,
            confidence=confidence,
            breakdown=breakdown,
            raw_text=raw_text,
            defaults_applied=_debug['defaults_applied'],
            patterns_matched=_debug['patterns_matched'],
        )

        logger.debug("Parsed earnings", extra={
            "platform": platform_hint.value,
            "amount": amount,
            "delivery_count": delivery_count,
            "confidence": confidence,
            "patterns_matched": _debug['patterns_matched'],
        })
        return result

    def analyze(self, text: str, platform_hint: Platform = Platform.OTHER) -> AnalysisOutcome:
        """Parse, validate and decide points eligibility."""
        result = self.parse(text, platform_hint)
        validation = self.validator.validate(result)
        return AnalysisOutcome(
            result=result,
            validation=validation,
            points_eligible=self._points_eligible(result, validation.is_valid),
        )

    def _points_eligible(self, result: ExtractionResult, is_valid: bool) -> bool:
        # Only today's single-day screens earn points
        return (
            is_valid
            and isinstance(result.period, SingleDay)
            and self.clock.is_today(result.period.date)
        )

    def _reconcile(
        self,
        amount: int,
        delivery_count: int,
        breakdown: List[DailyBreakdownEntry],
        _debug: Dict,
    ) -> Tuple[int, int]:
        """Use breakdown sums when the headline total was not anchored."""
        if not breakdown:
            return amount, delivery_count

        # Sums are capped at the storable width of the record fields
        total = min(sum(entry.amount for entry in breakdown), AMOUNT_LIMIT)
        total_count = min(sum(entry.delivery_count or 0 for entry in breakdown), COUNT_LIMIT)
        anchored = amount > 0 and _debug.get('amount_source') == ANCHOR

        if not anchored and total > amount:
            logger.warning("Using daily breakdown sums as totals", extra={
                "parsed_amount": amount,
                "breakdown_amount": total,
                "breakdown_count": total_count,
            })
            self._drop_default(_debug, DefaultPolicy.AMOUNT_ZERO_ON_NO_MATCH)
            note_default(_debug, DefaultPolicy.AMOUNT_FROM_BREAKDOWN)
            amount = total
            if total_count > delivery_count:
                self._drop_default(_debug, DefaultPolicy.COUNT_ZERO_ON_NO_MATCH)
                delivery_count = total_count
        elif anchored and total != amount:
            logger.warning("Headline total differs from daily breakdown", extra={
                "parsed_amount": amount,
                "breakdown_amount": total,
            })
            note_default(_debug, DefaultPolicy.BREAKDOWN_TOTAL_MISMATCH)

        return amount, delivery_count

    @staticmethod
    def _drop_default(_debug: Dict, policy: DefaultPolicy) -> None:
        applied = _debug.get('defaults_applied', [])
        if policy in applied:
            applied.remove(policy)
