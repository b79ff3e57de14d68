"""
End-to-end tests for the earnings parser.

Business day is 2025-06-01 unless a test builds its own clock.
"""

import time
from datetime import date, datetime

import pytest

from riderscan.models.earnings import (
    AMOUNT_LIMIT,
    DailyBreakdownEntry,
    DefaultPolicy,
    Platform,
    SingleDay,
    WeeklyRange,
)
from riderscan.services.parser import EarningsParser, normalize_text
from riderscan.services.validator import AVERAGE_OUT_OF_RANGE, NO_AMOUNT, ResultValidator, ValidationBounds
from riderscan.utils.clock import FixedBusinessClock

from conftest import KST

BAEMIN_TODAY = "오늘 배달 내역\n배달 17건\n53,920원\n05/29 목"

WEEKLY_SETTLEMENT = """2025.2.19 ~ 2025.2.25
2025.2.19 54,800원 13건
2025.2.20 40,000원 10건"""


@pytest.fixture
def parser(clock):
    return EarningsParser(clock=clock, validator=ResultValidator(ValidationBounds()))


class TestScenarios:

    def test_baemin_single_day(self, parser):
        outcome = parser.analyze(BAEMIN_TODAY, Platform.BAEMIN)
        result = outcome.result

        assert result.platform == Platform.BAEMIN
        assert result.amount == 53920
        assert result.delivery_count == 17
        assert result.period == SingleDay(date=date(2025, 5, 29))
        assert result.breakdown is None
        assert result.confidence >= 0.7
        assert outcome.validation.is_valid
        assert outcome.validation.warnings == []

    def test_missing_amount(self, parser):
        text = BAEMIN_TODAY.replace("53,920원\n", "")
        outcome = parser.analyze(text, Platform.BAEMIN)

        assert outcome.result.amount == 0
        assert not outcome.validation.is_valid
        assert NO_AMOUNT in outcome.validation.warnings

    def test_weekly_settlement(self, parser):
        result = parser.parse(WEEKLY_SETTLEMENT, Platform.BAEMIN)

        assert result.period == WeeklyRange(start=date(2025, 2, 19), end=date(2025, 2, 25))
        assert result.is_weekly
        assert result.breakdown == [
            DailyBreakdownEntry(date=date(2025, 2, 19), amount=54800, delivery_count=13),
            DailyBreakdownEntry(date=date(2025, 2, 20), amount=40000, delivery_count=10),
        ]

    def test_high_average_is_advisory(self, parser):
        text = "오늘 배달 내역\n배달 1건\n60,000원\n05/29 목"
        outcome = parser.analyze(text, Platform.BAEMIN)

        assert outcome.result.amount == 60000
        assert outcome.result.delivery_count == 1
        assert outcome.validation.is_valid
        assert AVERAGE_OUT_OF_RANGE in outcome.validation.warnings

    def test_future_date_is_clamped(self, parser, clock):
        text = "오늘 배달 내역\n2026.05.29 오전 3:12\n배달 10건\n45,000원"
        result = parser.parse(text, Platform.BAEMIN)

        assert result.period == SingleDay(date=clock.today())
        assert DefaultPolicy.DATE_CLAMPED_TO_TODAY in result.defaults_applied


class TestReconciliation:

    def test_breakdown_sums_replace_generic_total(self, parser):
        result = parser.parse(WEEKLY_SETTLEMENT, Platform.BAEMIN)

        assert result.amount == 94800
        assert result.delivery_count == 23
        assert DefaultPolicy.AMOUNT_FROM_BREAKDOWN in result.defaults_applied

    def test_anchored_total_is_kept(self, parser):
        text = "최종 지급 금액 100,000원\n" + WEEKLY_SETTLEMENT
        result = parser.parse(text, Platform.BAEMIN)

        assert result.amount == 100000
        assert result.patterns_matched['amount'] == 'baemin_final_payout'
        assert DefaultPolicy.BREAKDOWN_TOTAL_MISMATCH in result.defaults_applied

    def test_matching_anchored_total_is_silent(self, parser):
        text = "최종 지급 금액 94,800원\n" + WEEKLY_SETTLEMENT
        result = parser.parse(text, Platform.BAEMIN)

        assert result.amount == 94800
        assert result.defaults_applied == []

    def test_breakdown_sums_replace_first_line_amount(self, parser):
        text = "5/19 ~ 5/25\n5/19 (월) 32,000원 8건\n5/20 (화) 28,000원 7건"
        result = parser.parse(text, Platform.COUPANG)

        assert result.amount == 60000
        assert result.delivery_count == 15
        assert DefaultPolicy.AMOUNT_ZERO_ON_NO_MATCH not in result.defaults_applied
        assert all(result.period.contains(entry.date) for entry in result.breakdown)

    def test_dotted_weekly_lines(self, parser):
        text = "2.19 ~ 2.25\n2.19 54,800원 13건\n2.20 40,000원 10건"
        result = parser.parse(text, Platform.OTHER)

        assert result.period == WeeklyRange(start=date(2025, 2, 19), end=date(2025, 2, 25))
        assert len(result.breakdown) == 2
        assert result.amount == 94800
        assert result.delivery_count == 23

    def test_coupang_full_date_lines(self, parser):
        result = parser.parse(WEEKLY_SETTLEMENT, Platform.COUPANG)

        assert len(result.breakdown) == 2
        assert result.amount == 94800

    def test_breakdown_sum_is_capped(self, parser):
        text = f"2025.2.19 ~ 2025.2.25\n2025.2.19 {AMOUNT_LIMIT}원\n2025.2.20 {AMOUNT_LIMIT}원"
        result = parser.parse(text, Platform.OTHER)

        assert len(result.breakdown) == 2
        assert result.amount == AMOUNT_LIMIT


class TestRouting:

    def test_hint_is_never_overridden(self, parser):
        result = parser.parse(BAEMIN_TODAY, Platform.OTHER)

        assert result.platform == Platform.OTHER
        assert result.detected_platform == Platform.BAEMIN

    def test_garbage_text(self, parser):
        outcome = parser.analyze("@@## ~~ ??", Platform.OTHER)

        assert outcome.result.detected_platform == Platform.OTHER
        assert outcome.result.amount == 0
        assert outcome.result.delivery_count == 0
        assert outcome.result.confidence <= 0.2
        assert not outcome.validation.is_valid
        assert not outcome.points_eligible

    def test_long_input_is_fast(self, parser):
        text = "5/28 ~ 6/3\n" + "2025.1.1 1원 " * 800

        started = time.perf_counter()
        result = parser.parse(text, Platform.BAEMIN)
        assert time.perf_counter() - started < 2.0
        assert result.breakdown == []

    @pytest.mark.parametrize("text", ["", None])
    def test_empty_input(self, parser, text):
        outcome = parser.analyze(text, Platform.COUPANG)
        assert outcome.result.raw_text == ""
        assert not outcome.validation.is_valid


class TestNormalization:

    def test_raw_text_is_preserved(self, parser):
        text = BAEMIN_TODAY.replace("\n", "\r\n")
        result = parser.parse(text, Platform.BAEMIN)

        assert result.raw_text == text
        assert result.amount == 53920

    def test_full_width_digits(self, parser):
        result = parser.parse("배달 １７건\n５３，９２０원\n2025-05-29", Platform.OTHER)

        assert result.amount == 53920
        assert result.delivery_count == 17
        assert result.period == SingleDay(date=date(2025, 5, 29))

    def test_normalize_text(self):
        assert normalize_text("a\r\nb\rc") == "a\nb\nc"
        assert normalize_text("") == ""


class TestPointsEligibility:

    def test_today_single_day_is_eligible(self):
        # 03:00 on the 30th still belongs to business day 29
        clock = FixedBusinessClock(datetime(2025, 5, 30, 3, 0, tzinfo=KST), rollover_hour=6)
        parser = EarningsParser(clock=clock, validator=ResultValidator(ValidationBounds()))

        assert parser.analyze(BAEMIN_TODAY, Platform.BAEMIN).points_eligible

    def test_past_day_is_not_eligible(self, parser):
        assert not parser.analyze(BAEMIN_TODAY, Platform.BAEMIN).points_eligible

    def test_invalid_result_is_not_eligible(self):
        clock = FixedBusinessClock(datetime(2025, 5, 29, 20, 0, tzinfo=KST), rollover_hour=6)
        parser = EarningsParser(clock=clock, validator=ResultValidator(ValidationBounds()))
        text = BAEMIN_TODAY.replace("53,920원\n", "")

        assert not parser.analyze(text, Platform.BAEMIN).points_eligible

    def test_weekly_is_not_eligible(self, parser):
        assert not parser.analyze(WEEKLY_SETTLEMENT, Platform.BAEMIN).points_eligible
