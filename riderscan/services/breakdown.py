"""
Daily breakdown extraction for weekly settlement screens.
"""

import logging
import re
from datetime import date
from typing import Dict, List, Optional

from riderscan.models.earnings import (
    AMOUNT_LIMIT,
    COUNT_LIMIT,
    DailyBreakdownEntry,
    Platform,
    WeeklyRange,
)
from riderscan.services.patterns import (
    BREAKDOWN_LINE_DATES,
    LINE_AMOUNT,
    LINE_COUNT,
    WEEKLY_RANGE_PATTERNS,
    PatternSpec,
)
from riderscan.services.period import build_date
from riderscan.utils.money import parse_count, parse_won

logger = logging.getLogger(__name__)


class DailyBreakdownExtractor:
    """
    Pull per-day lines ("2025.2.19 54,800원 13건") out of a weekly report.

    Each line is matched in two steps: the first of the platform's date
    formats found on the line, then the first won amount and the first
    delivery count after that date. If the platform's formats find nothing
    anywhere in the text, the generic formats are tried. Lines that repeat
    a date are merged so each date appears once.
    """

    def __init__(
        self,
        line_dates: Optional[Dict[Platform, List[PatternSpec]]] = None,
        header_patterns: Optional[List[PatternSpec]] = None,
    ):
        self.line_dates = BREAKDOWN_LINE_DATES if line_dates is None else line_dates
        self.header_patterns = WEEKLY_RANGE_PATTERNS if header_patterns is None else header_patterns

    def extract_breakdown(
        self,
        text: str,
        platform: Platform,
        period: Optional[WeeklyRange] = None,
        _debug: Optional[Dict] = None,
    ) -> List[DailyBreakdownEntry]:
        """
        Extract daily entries sorted by date.

        Args:
            text: Receipt text
            platform: Platform whose line formats are tried first
            period: Weekly range the entries belong to. Year-less dates are
                resolved against it and entries outside it are dropped.
                Without a period only lines with an explicit year are kept,
                so callers holding a weekly period should always pass it.

        Returns:
            Entries in ascending date order, one per date
        """
        lines = [line.strip() for line in (text or "").splitlines()]
        lines = [line for line in lines if line and not self._is_range_header(line)]

        specs = self.line_dates.get(platform) or self.line_dates[Platform.OTHER]
        entries = self._parse_lines(lines, specs, period)

        fallback = self.line_dates.get(Platform.OTHER)
        if not entries and fallback and fallback is not specs:
            entries = self._parse_lines(lines, fallback, period)
            if entries:
                logger.debug("Breakdown found with generic line formats", extra={
                    "platform": platform.value,
                })

        merged = self._merge(entries)
        result = sorted(merged.values(), key=lambda e: e.date)

        if _debug is not None:
            _debug['breakdown_lines'] = len(entries)
        logger.debug("Extracted daily breakdown", extra={
            "platform": platform.value,
            "lines": len(entries),
            "days": len(result),
        })
        return result

    def _is_range_header(self, line: str) -> bool:
        return any(spec.compiled.search(line) for spec in self.header_patterns)

    def _parse_lines(
        self,
        lines: List[str],
        specs: List[PatternSpec],
        period: Optional[WeeklyRange],
    ) -> List[DailyBreakdownEntry]:
        entries = []
        for line in lines:
            entry = self._parse_line(line, specs, period)
            if entry is not None:
                entries.append(entry)
        return entries

    def _parse_line(
        self,
        line: str,
        specs: List[PatternSpec],
        period: Optional[WeeklyRange],
    ) -> Optional[DailyBreakdownEntry]:
        for spec in specs:
            match = spec.compiled.search(line)
            if match is None:
                continue

            rest = line[match.end():]
            amount = self._amount(rest)
            count = self._count(rest)
            if amount is None and count is None:
                continue

            day = self._resolve_date(match, period)
            if day is None:
                logger.debug("Breakdown line outside period", extra={"line": line, "pattern": spec.name})
                return None

            return DailyBreakdownEntry(date=day, amount=amount or 0, delivery_count=count)
        return None

    def _amount(self, rest: str) -> Optional[int]:
        match = LINE_AMOUNT.compiled.search(rest)
        if match is None:
            return None
        amount = parse_won(match.group('amount'))
        if amount is None or amount > AMOUNT_LIMIT:
            return None
        return amount

    def _count(self, rest: str) -> Optional[int]:
        match = LINE_COUNT.compiled.search(rest)
        if match is None:
            return None
        count = parse_count(match.group('count'))
        if count is None or count > COUNT_LIMIT:
            return None
        return count

    def _resolve_date(self, match: re.Match, period: Optional[WeeklyRange]) -> Optional[date]:
        groups = match.groupdict()
        month, day = int(groups['month']), int(groups['day'])

        if groups.get('year'):
            parsed = build_date(int(groups['year']), month, day)
            if parsed is None:
                return None
            if period is not None and not period.contains(parsed):
                return None
            return parsed

        if period is None:
            return None

        # A range may straddle the new year
        for year in sorted({period.start.year, period.end.year}):
            parsed = build_date(year, month, day)
            if parsed is not None and period.contains(parsed):
                return parsed
        return None

    def _merge(self, entries: List[DailyBreakdownEntry]) -> Dict[date, DailyBreakdownEntry]:
        merged: Dict[date, DailyBreakdownEntry] = {}
        for entry in entries:
            existing = merged.get(entry.date)
            if existing is None:
                merged[entry.date] = entry
                continue

            if entry.amount > existing.amount:
                winner, loser = entry, existing
            else:
                winner, loser = existing, entry

            if winner.delivery_count is None and loser.delivery_count is not None:
                winner = winner.model_copy(update={'delivery_count': loser.delivery_count})
            merged[entry.date] = winner
        return merged
