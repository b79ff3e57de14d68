"""
Total amount and delivery count extraction.
"""

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from riderscan.models.earnings import AMOUNT_LIMIT, COUNT_LIMIT, DefaultPolicy, Platform
from riderscan.services.patterns import (
    AMOUNT_PATTERNS,
    COUNT_PATTERNS,
    GENERIC_AMOUNT_PATTERNS,
    GENERIC_COUNT_PATTERNS,
    PatternSpec,
)
from riderscan.services.period import note_default, note_pattern
from riderscan.utils.money import parse_count, parse_won

logger = logging.getLogger(__name__)

ANCHOR = 'anchor'
GENERIC = 'generic'


class AmountCountExtractor:
    """
    Find the total earnings and number of deliveries on a screen.

    Platform anchors (labels such as "배달료 합계") are tried before the
    generic fallbacks. Both extractors are total: no match yields 0 and
    records the zero-on-no-match policy.
    """

    def __init__(
        self,
        amount_patterns: Optional[Dict[Platform, List[PatternSpec]]] = None,
        generic_amount_patterns: Optional[List[PatternSpec]] = None,
        count_patterns: Optional[Dict[Platform, List[PatternSpec]]] = None,
        generic_count_patterns: Optional[List[PatternSpec]] = None,
    ):
        self.amount_patterns = AMOUNT_PATTERNS if amount_patterns is None else amount_patterns
        self.generic_amount_patterns = (
            GENERIC_AMOUNT_PATTERNS if generic_amount_patterns is None else generic_amount_patterns
        )
        self.count_patterns = COUNT_PATTERNS if count_patterns is None else count_patterns
        self.generic_count_patterns = (
            GENERIC_COUNT_PATTERNS if generic_count_patterns is None else generic_count_patterns
        )

    def extract_amount(
        self,
        text: str,
        platform: Platform = Platform.OTHER,
        _debug: Optional[Dict] = None,
    ) -> int:
        """
        Extract the total amount in won.

        Args:
            text: Receipt text
            platform: Platform whose anchors are tried first

        Returns:
            Positive amount, or 0 if nothing matched
        """
        for spec, source in self._ordered(self.amount_patterns, self.generic_amount_patterns, platform):
            for match in spec.compiled.finditer(text or ""):
                amount = parse_won(match.group('amount'))
                # "0원" lines (unused promotions) are never the total
                if not amount or amount > AMOUNT_LIMIT:
                    continue
                note_pattern(_debug, 'amount', spec.name)
                if _debug is not None:
                    _debug['amount_source'] = source
                logger.debug("Amount matched", extra={"pattern": spec.name, "amount": amount})
                return amount

        logger.warning("No amount found", extra={"platform": platform.value})
        note_default(_debug, DefaultPolicy.AMOUNT_ZERO_ON_NO_MATCH)
        return 0

    def extract_count(
        self,
        text: str,
        platform: Platform = Platform.OTHER,
        _debug: Optional[Dict] = None,
    ) -> int:
        """Extract the number of deliveries, or 0 if nothing matched."""
        for spec, source in self._ordered(self.count_patterns, self.generic_count_patterns, platform):
            for match in spec.compiled.finditer(text or ""):
                count = parse_count(match.group('count'))
                if not count or count > COUNT_LIMIT:
                    continue
                note_pattern(_debug, 'delivery_count', spec.name)
                if _debug is not None:
                    _debug['count_source'] = source
                logger.debug("Delivery count matched", extra={"pattern": spec.name, "count": count})
                return count

        logger.warning("No delivery count found", extra={"platform": platform.value})
        note_default(_debug, DefaultPolicy.COUNT_ZERO_ON_NO_MATCH)
        return 0

    def _ordered(
        self,
        anchored: Dict[Platform, List[PatternSpec]],
        generic: List[PatternSpec],
        platform: Platform,
    ) -> Iterator[Tuple[PatternSpec, str]]:
        for spec in anchored.get(platform, []):
            yield spec, ANCHOR
        for spec in generic:
            yield spec, GENERIC
