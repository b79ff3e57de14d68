"""
Confidence scoring for extracted earnings.

The score estimates how trustworthy the automatic extraction is, from 0.0
(unreadable) to 1.0 (every expected element of the platform's screen was
seen). It gates automatic acceptance in the validator.
"""

from typing import Dict, List, Optional

from riderscan.models.earnings import Platform
from riderscan.services.patterns import CONFIDENCE_MARKERS, Marker

__all__ = ['ConfidenceScorer']


class ConfidenceScorer:
    """
    Weighted marker scoring.

    Scoring factors:
    - Sum of matched marker weights for the platform (weights sum to <= 1)
    - Other: flat base of 0.2 plus the generic marker set
    - Short text (< 20 chars): x0.5, most likely a failed OCR
    - Long text (> 500 chars): x1.1, a full screen was captured
    """

    MIN_TEXT_LENGTH = 20
    SHORT_TEXT_FACTOR = 0.5
    LONG_TEXT_LENGTH = 500
    LONG_TEXT_FACTOR = 1.1
    OTHER_BASE_SCORE = 0.2

    def __init__(self, markers: Optional[Dict[Platform, List[Marker]]] = None):
        self.markers = CONFIDENCE_MARKERS if markers is None else markers

    def score(self, text: str, platform: Platform) -> float:
        """
        Score recognized text for the given platform.

        Args:
            text: Receipt text
            platform: Platform whose marker set is used

        Returns:
            Score from 0.0 to 1.0, rounded to 2 decimals
        """
        if not text or not text.strip():
            return 0.0

        markers = self.markers.get(platform)
        if not markers:
            platform = Platform.OTHER
            markers = self.markers.get(Platform.OTHER, [])

        base_score = sum(m.weight for m in markers if m.matches(text))
        if platform == Platform.OTHER:
            base_score += self.OTHER_BASE_SCORE

        length = len(text.strip())
        if length < self.MIN_TEXT_LENGTH:
            base_score *= self.SHORT_TEXT_FACTOR
        elif length > self.LONG_TEXT_LENGTH:
            base_score *= self.LONG_TEXT_FACTOR

        # Clamp to [0.0, 1.0]
        return round(max(0.0, min(1.0, base_score)), 2)
