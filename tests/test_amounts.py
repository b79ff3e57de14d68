"""
Tests for amount and delivery count extraction.
"""

import pytest

from riderscan.models.earnings import DefaultPolicy, Platform
from riderscan.services.amounts import ANCHOR, GENERIC, AmountCountExtractor


@pytest.fixture
def extractor():
    return AmountCountExtractor()


class TestAmountAnchors:

    def test_baemin_fee_total_on_next_line(self, extractor, debug):
        assert extractor.extract_amount("배달료 합계\n53,920원", Platform.BAEMIN, debug) == 53920
        assert debug['patterns_matched']['amount'] == 'baemin_fee_total'
        assert debug['amount_source'] == ANCHOR

    def test_baemin_fee_total_beats_earlier_amounts(self, extractor):
        text = "프로모션 3,000원\n배달료 합계 53,920원"
        assert extractor.extract_amount(text, Platform.BAEMIN) == 53920

    def test_baemin_final_payout(self, extractor):
        assert extractor.extract_amount("최종 지급 금액 412,300원", Platform.BAEMIN) == 412300

    def test_baemin_delivery_fee(self, extractor, debug):
        assert extractor.extract_amount("배달료 181,710원", Platform.BAEMIN, debug) == 181710
        assert debug['patterns_matched']['amount'] == 'baemin_delivery_fee'

    def test_coupang_total_fee(self, extractor):
        assert extractor.extract_amount("총 배달 수수료 53,920원", Platform.COUPANG) == 53920

    def test_coupang_my_income(self, extractor):
        assert extractor.extract_amount("내 수입 48,200원", Platform.COUPANG) == 48200

    def test_anchor_of_other_platform_is_not_used(self, extractor, debug):
        text = "100원 총 배달 수수료 53,920원"
        assert extractor.extract_amount(text, Platform.BAEMIN, debug) == 100
        assert debug['amount_source'] == GENERIC


class TestAmountFallback:

    def test_first_won_number(self, extractor, debug):
        assert extractor.extract_amount("53,920원\n12,000원", Platform.OTHER, debug) == 53920
        assert debug['patterns_matched']['amount'] == 'won_suffixed'

    def test_zero_amount_is_skipped(self, extractor):
        assert extractor.extract_amount("프로모션 0원\n53,920원", Platform.OTHER) == 53920

    def test_overlong_amount_is_skipped(self, extractor):
        assert extractor.extract_amount("1" * 30 + "원\n53,920원", Platform.OTHER) == 53920
        assert extractor.extract_amount("9" * 5000 + "원", Platform.OTHER) == 0

    @pytest.mark.parametrize("text,expected", [
        ("53.920원", 53920),
        ("53,920 원", 53920),
        ("1,234,567원", 1234567),
        ("8500원", 8500),
    ])
    def test_number_formats(self, extractor, text, expected):
        assert extractor.extract_amount(text, Platform.OTHER) == expected

    @pytest.mark.parametrize("text", ["", "배달 17건", "원", "abc", "\x00\x01", "12,34원"])
    def test_no_match_returns_zero(self, extractor, text, debug):
        assert extractor.extract_amount(text, Platform.OTHER, debug) == 0
        assert DefaultPolicy.AMOUNT_ZERO_ON_NO_MATCH in debug['defaults_applied']


class TestCount:

    def test_baemin_count_label(self, extractor, debug):
        assert extractor.extract_count("배달건 39건", Platform.BAEMIN, debug) == 39
        assert debug['patterns_matched']['delivery_count'] == 'baemin_delivery_count'

    def test_coupang_count(self, extractor):
        assert extractor.extract_count("배달 17건", Platform.COUPANG) == 17

    def test_coupang_ocr_variant(self, extractor, debug):
        assert extractor.extract_count("HiE 17", Platform.COUPANG, debug) == 17
        assert debug['patterns_matched']['delivery_count'] == 'coupang_ocr_count'

    def test_generic_suffix(self, extractor):
        assert extractor.extract_count("오늘 17건 완료", Platform.OTHER) == 17

    def test_generic_label(self, extractor, debug):
        assert extractor.extract_count("배달건수: 17", Platform.OTHER, debug) == 17
        assert debug['patterns_matched']['delivery_count'] == 'count_labelled'

    @pytest.mark.parametrize("text", ["", "53,920원", "건", "0건"])
    def test_no_match_returns_zero(self, extractor, text, debug):
        assert extractor.extract_count(text, Platform.OTHER, debug) == 0
        assert DefaultPolicy.COUNT_ZERO_ON_NO_MATCH in debug['defaults_applied']

    def test_platform_defaults_to_other(self, extractor):
        assert extractor.extract_count("17건") == 17
        assert extractor.extract_amount("53,920원") == 53920

    def test_overlong_count_is_skipped(self, extractor, debug):
        assert extractor.extract_count("9" * 5000 + "건", Platform.OTHER, debug) == 0
        assert DefaultPolicy.COUNT_ZERO_ON_NO_MATCH in debug['defaults_applied']
        assert extractor.extract_count("9" * 11 + "건 17건", Platform.OTHER) == 17
