"""
Platform classifier for earnings screenshots.
"""

import logging
from typing import Dict, List, Optional

from riderscan.models.earnings import Platform
from riderscan.services.patterns import (
    CLASSIFIER_ACTIVATION_THRESHOLD,
    CLASSIFIER_MARKERS,
    Marker,
)

logger = logging.getLogger(__name__)


class PlatformClassifier:
    """
    Guess which platform produced a screenshot from its recognized text.

    Each platform has a list of weighted markers. A platform-exclusive screen
    title ("배달료 합계", "총 배달 수수료") outweighs several generic hints
    such as a date format or a grouped amount. The best score wins if it
    reaches the activation threshold; equal scores go to the platform listed
    first in `Platform` (Baemin before Coupang).

    The result is advisory. Callers route extraction by the rider's own
    platform choice and only log disagreements.
    """

    def __init__(
        self,
        markers: Optional[Dict[Platform, List[Marker]]] = None,
        threshold: float = CLASSIFIER_ACTIVATION_THRESHOLD,
    ):
        self.markers = CLASSIFIER_MARKERS if markers is None else markers
        self.threshold = threshold

    def scores(self, text: str) -> Dict[Platform, float]:
        """Return the summed marker weight for every known platform."""
        scores = {}
        for platform in Platform:
            markers = self.markers.get(platform)
            if not markers:
                continue
            scores[platform] = sum(m.weight for m in markers if m.matches(text))
        return scores

    def classify(self, text: str) -> Platform:
        """
        Classify text as one of the known platforms.

        Args:
            text: Raw OCR text

        Returns:
            Best-scoring platform, or Platform.OTHER when no platform reaches
            the activation threshold
        """
        if not text:
            return Platform.OTHER

        scores = self.scores(text)

        best_platform = Platform.OTHER
        best_score = 0.0
        # Strict comparison keeps the earlier platform on ties
        for platform, score in scores.items():
            if score > best_score:
                best_platform, best_score = platform, score

        if best_score < self.threshold:
            best_platform = Platform.OTHER

        logger.debug("Platform scores", extra={
            "scores": {p.value: s for p, s in scores.items()},
            "platform": best_platform.value,
        })
        return best_platform
