"""
Reporting period extraction: single business day or weekly settlement range.
"""

import logging
import re
from datetime import date
from typing import Dict, List, Optional

from riderscan.models.earnings import (
    DefaultPolicy,
    PeriodKind,
    Platform,
    SingleDay,
    WeeklyRange,
)
from riderscan.services.patterns import (
    GENERIC_DATE_PATTERNS,
    SINGLE_DATE_PATTERNS,
    WEEKLY_RANGE_PATTERNS,
    PatternSpec,
)
from riderscan.utils.clock import BusinessClock

logger = logging.getLogger(__name__)

# Anything earlier is an OCR misread, not a receipt
MIN_YEAR = 2000


def build_date(year: int, month: int, day: int) -> Optional[date]:
    """Return a date for valid calendar values, None otherwise."""
    try:
        parsed = date(year, month, day)
    except ValueError:
        return None
    if parsed.year < MIN_YEAR:
        return None
    return parsed


def note_default(_debug: Optional[Dict], policy: DefaultPolicy) -> None:
    """Record an applied default policy in the debug metadata."""
    if _debug is None:
        return
    applied = _debug.setdefault('defaults_applied', [])
    if policy not in applied:
        applied.append(policy)


def note_pattern(_debug: Optional[Dict], field_name: str, pattern_name: str) -> None:
    if _debug is not None:
        _debug.setdefault('patterns_matched', {})[field_name] = pattern_name


class PeriodExtractor:
    """
    Decide whether a screenshot covers one day or a weekly range.

    Weekly range headers are tried first because their endpoints would
    otherwise be picked up as single dates. Single dates are then tried with
    the platform's own formats before the generic ones. Dates without a year
    take the year of the business day; any date after the business day is
    clamped to it, since a screenshot cannot describe the future and a
    misread digit ("5" as "6") is the usual cause.
    """

    def __init__(
        self,
        weekly_patterns: Optional[List[PatternSpec]] = None,
        single_patterns: Optional[Dict[Platform, List[PatternSpec]]] = None,
        generic_patterns: Optional[List[PatternSpec]] = None,
    ):
        self.weekly_patterns = WEEKLY_RANGE_PATTERNS if weekly_patterns is None else weekly_patterns
        self.single_patterns = SINGLE_DATE_PATTERNS if single_patterns is None else single_patterns
        self.generic_patterns = GENERIC_DATE_PATTERNS if generic_patterns is None else generic_patterns

    def extract_period(
        self,
        text: str,
        platform: Platform,
        clock: BusinessClock,
        _debug: Optional[Dict] = None,
    ) -> PeriodKind:
        """
        Extract the reporting period from receipt text.

        Args:
            text: Receipt text
            platform: Platform whose date formats are tried first
            clock: Business clock defining "today"

        Returns:
            WeeklyRange if a range header is present, otherwise SingleDay.
            Never fails: with no recognizable date the business day is used.
        """
        today = clock.today()

        weekly = self._extract_weekly(text, today, _debug)
        if weekly is not None:
            return weekly

        specs = list(self.single_patterns.get(platform, [])) + list(self.generic_patterns)
        for spec in specs:
            for match in spec.compiled.finditer(text):
                parsed = self._date_from_match(match, today)
                if parsed is None:
                    continue
                note_pattern(_debug, 'period', spec.name)
                return SingleDay(date=self._clamp(parsed, today, _debug))

        logger.warning("No date found, defaulting period to business day", extra={
            "platform": platform.value,
            "today": today.isoformat(),
        })
        note_default(_debug, DefaultPolicy.PERIOD_DEFAULTED_TO_TODAY)
        return SingleDay(date=today)

    def _extract_weekly(self, text: str, today: date, _debug: Optional[Dict]) -> Optional[WeeklyRange]:
        for spec in self.weekly_patterns:
            for match in spec.compiled.finditer(text):
                bounds = self._range_from_match(match, today, _debug)
                if bounds is None:
                    continue
                start, end = bounds
                note_pattern(_debug, 'period', spec.name)
                return WeeklyRange(
                    start=self._clamp(start, today, _debug),
                    end=self._clamp(end, today, _debug),
                )
        return None

    def _range_from_match(self, match: re.Match, today: date, _debug: Optional[Dict]):
        groups = match.groupdict()
        m1, d1, d2 = int(groups['m1']), int(groups['d1']), int(groups['d2'])
        y1 = int(groups['y1']) if groups.get('y1') else None
        y2 = int(groups['y2']) if groups.get('y2') else None

        if groups.get('m2'):
            m2 = int(groups['m2'])
        elif d2 < d1:
            # "6월 28일 ~ 4일" ends in the following month
            m2 = m1 % 12 + 1
            if m1 == 12 and y2 is None and y1 is not None:
                y2 = y1 + 1
        else:
            m2 = m1

        year_inferred = y1 is None and y2 is None
        if year_inferred:
            y1 = y2 = today.year
        elif y1 is None:
            y1 = y2
        elif y2 is None:
            y2 = y1

        start = build_date(y1, m1, d1)
        end = build_date(y2, m2, d2)
        if start is None or end is None:
            return None

        if start > end:
            if year_inferred:
                # "12/29 ~ 1/4" spans the new year
                start = build_date(start.year - 1, start.month, start.day)
                if start is None:
                    return None
            else:
                logger.warning("Range endpoints out of order, swapping", extra={
                    "start": start.isoformat(),
                    "end": end.isoformat(),
                })
                note_default(_debug, DefaultPolicy.RANGE_SWAPPED)
                start, end = end, start

        return start, end

    def _date_from_match(self, match: re.Match, today: date) -> Optional[date]:
        groups = match.groupdict()
        year = int(groups['year']) if groups.get('year') else today.year
        return build_date(year, int(groups['month']), int(groups['day']))

    def _clamp(self, parsed: date, today: date, _debug: Optional[Dict]) -> date:
        if parsed <= today:
            return parsed
        logger.warning("Parsed date is in the future, clamping to business day", extra={
            "parsed": parsed.isoformat(),
            "today": today.isoformat(),
        })
        note_default(_debug, DefaultPolicy.DATE_CLAMPED_TO_TODAY)
        return today
