"""
Pattern tables for every supported earnings screen.

All platform knowledge lives here: classifier markers, confidence markers,
date formats, amount/count anchors and daily breakdown line formats. The
extractors only know how to apply a table, never what is in it.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from riderscan.models.earnings import Platform


@dataclass(frozen=True)
class PatternSpec:
    """A named regex pattern with example and notes for documentation."""
    name: str
    pattern: str
    example: str
    notes: Optional[str] = None
    priority: Optional[int] = None
    flags: int = re.IGNORECASE
    compiled: re.Pattern = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'compiled', re.compile(self.pattern, self.flags))


@dataclass(frozen=True)
class Marker:
    """
    A weighted piece of evidence: either a literal substring or a regex.

    Exactly one of `literal` / `pattern` is set.
    """
    name: str
    weight: float
    literal: Optional[str] = None
    pattern: Optional[str] = None
    flags: int = re.IGNORECASE
    compiled: Optional[re.Pattern] = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        if (self.literal is None) == (self.pattern is None):
            raise ValueError(f"Marker {self.name!r} needs exactly one of literal/pattern")
        if self.pattern is not None:
            object.__setattr__(self, 'compiled', re.compile(self.pattern, self.flags))

    def matches(self, text: str) -> bool:
        if self.literal is not None:
            return self.literal in text
        return self.compiled.search(text) is not None


# Shared fragments
WON_NUMBER = r'\d{1,3}(?:[,.]\d{3})+|\d+'
RANGE_SEPARATOR = r'\s*[~∼〜–\-]\s*'
WEEKDAY = r'(?:\s*\(?[월화수목금토일]\)?)?'

_AMOUNT = rf'(?<![\d,.])(?P<amount>{WON_NUMBER})\s*원'
_COUNT = r'(?<![\d,.])(?P<count>\d+)\s*건'


# ---------------------------------------------------------------------------
# Platform classification (weights sum per platform, activation threshold 2)
# ---------------------------------------------------------------------------

CLASSIFIER_MARKERS: Dict[Platform, List[Marker]] = {
    Platform.BAEMIN: [
        Marker('fee_total', 5, pattern=r'배\s*달\s*료\s*합\s*계'),
        Marker('today_history_title', 3, literal='오늘 배달 내역'),
        Marker('service_day', 3, literal='운행일'),
        Marker('connect_logo', 3, pattern=r'배[민만]\s*\\?\s*커넥트'),
        Marker('delivery_count_label', 2, literal='배달건'),
        Marker('korean_month_day', 2, pattern=r'\d{1,2}월\s*\d{1,2}일'),
        Marker('brand_full', 1, literal='배달의민족'),
        Marker('brand_short', 1, literal='배민'),
    ],
    Platform.COUPANG: [
        Marker('total_fee', 5, pattern=r'총\s*배\s*달\s*수\s*수\s*료'),
        Marker('my_income_title', 2, literal='내 수입'),
        Marker('brand', 2, literal='쿠팡이츠'),
        Marker('slash_month_day', 2, pattern=r'(?<![\d/])\d{1,2}/\d{1,2}(?![\d/])'),
        Marker('promotion', 1, literal='프로모션'),
        Marker('incentive', 1, literal='인센티브'),
        Marker('clock_time', 1, pattern=r'\d{1,2}:\d{2}'),
        Marker('distance_km', 1, pattern=r'\d+(?:\.\d+)?\s*km'),
        Marker('grouped_amount', 1, pattern=r'\d{2,3},\d{3}'),
    ],
}

CLASSIFIER_ACTIVATION_THRESHOLD = 2


# ---------------------------------------------------------------------------
# Confidence markers (weights per platform sum to <= 1.0)
# ---------------------------------------------------------------------------

CONFIDENCE_MARKERS: Dict[Platform, List[Marker]] = {
    Platform.BAEMIN: [
        Marker('screen_title', 0.30, pattern=r'오늘\s*배달\s*내역'),
        Marker('won_amount', 0.20, pattern=r'\d\s*원'),
        Marker('delivery_count', 0.20, pattern=r'\d\s*건'),
        Marker('date', 0.10, pattern=r'\d{1,2}월\s*\d{1,2}일|\d{4}\.\d{1,2}\.\d{1,2}|\d{1,2}/\d{1,2}'),
        Marker('fee_total', 0.10, pattern=r'배\s*달\s*료\s*합\s*계'),
        Marker('service_day', 0.05, literal='운행일'),
        Marker('brand', 0.05, pattern=r'배민|배만\s*커넥트|배달의민족'),
    ],
    Platform.COUPANG: [
        Marker('total_fee', 0.30, pattern=r'총\s*배\s*달\s*수\s*수\s*료'),
        Marker('grouped_amount', 0.20, pattern=r'\d{2,3}[,.]\d{3}'),
        Marker('delivery_count', 0.15, pattern=r'\d\s*건|H[iIl1]E\s*\d+'),
        Marker('slash_date', 0.10, pattern=r'\d{1,2}/\d{1,2}'),
        Marker('my_income_title', 0.10, pattern=r'내\s*수\s*입'),
        Marker('brand', 0.10, literal='쿠팡'),
        Marker('clock_time', 0.05, pattern=r'\d{1,2}:\d{2}'),
    ],
    Platform.OTHER: [
        Marker('won_amount', 0.25, pattern=r'\d\s*원'),
        Marker('delivery_count', 0.25, pattern=r'\d\s*건'),
        Marker('date', 0.10, pattern=r'\d{1,2}월\s*\d{1,2}일|\d{4}[.\-/]\d{1,2}[.\-/]\d{1,2}|\d{1,2}/\d{1,2}'),
    ],
}


# ---------------------------------------------------------------------------
# Periods
# ---------------------------------------------------------------------------

# Groups: y1?, m1, d1, y2?, m2?, d2
WEEKLY_RANGE_PATTERNS: List[PatternSpec] = [
    PatternSpec(
        name='weekly_ymd',
        pattern=(
            r'(?<!\d)(?P<y1>\d{4})[.\-/](?P<m1>\d{1,2})[.\-/](?P<d1>\d{1,2})\.?' + WEEKDAY
            + RANGE_SEPARATOR
            + r'(?:(?P<y2>\d{4})[.\-/])?(?P<m2>\d{1,2})[.\-/](?P<d2>\d{1,2})(?!\d)'
        ),
        example='2025.2.19 ~ 2025.2.25',
        notes='Full year-month-day, end year optional',
    ),
    PatternSpec(
        name='weekly_korean_md',
        pattern=(
            r'(?:(?P<y1>\d{4})년\s*)?(?P<m1>\d{1,2})월\s*(?P<d1>\d{1,2})일' + WEEKDAY
            + RANGE_SEPARATOR
            + r'(?:(?P<y2>\d{4})년\s*)?(?:(?P<m2>\d{1,2})월\s*)?(?P<d2>\d{1,2})일'
        ),
        example='6월 1일 ~ 6월 7일',
        notes='Korean month-day, end month optional',
    ),
    PatternSpec(
        name='weekly_dotted_md',
        pattern=(
            r'(?<![\d.])(?P<m1>\d{1,2})\.(?P<d1>\d{1,2})\.?' + WEEKDAY
            + RANGE_SEPARATOR
            + r'(?P<m2>\d{1,2})\.(?P<d2>\d{1,2})(?![\d.]|\s*km)'
        ),
        example='2.19 ~ 2.25',
        notes='Bare month.day without year',
    ),
    PatternSpec(
        name='weekly_slash_md',
        pattern=(
            r'(?<![\d/])(?P<m1>\d{1,2})/(?P<d1>\d{1,2})(?![\d/])' + WEEKDAY
            + RANGE_SEPARATOR
            + r'(?P<m2>\d{1,2})/(?P<d2>\d{1,2})(?![\d/])'
        ),
        example='5/28 ~ 6/3',
        notes='Coupang weekly income header',
    ),
]

_KOREAN_MONTH_DAY = PatternSpec(
    name='korean_month_day',
    pattern=r'(?P<month>\d{1,2})월\s*(?P<day>\d{1,2})일',
    example='6월 20일',
)

_SLASH_MONTH_DAY = PatternSpec(
    name='slash_month_day',
    pattern=r'(?<![\d/.])(?P<month>\d{1,2})/(?P<day>\d{1,2})(?![\d/])',
    example='05/29',
    notes='Lookarounds keep it from matching inside YYYY/MM/DD',
)

_DOTTED_YMD = PatternSpec(
    name='dotted_ymd',
    pattern=r'(?<!\d)(?P<year>\d{4})\.(?P<month>\d{1,2})\.(?P<day>\d{1,2})(?!\d)',
    example='2025.06.20',
)

# Groups: year?, month, day
SINGLE_DATE_PATTERNS: Dict[Platform, List[PatternSpec]] = {
    Platform.BAEMIN: [
        PatternSpec(
            name='baemin_service_day',
            pattern=r'운행일\s*:?\s*(?P<month>\d{1,2})월\s*(?P<day>\d{1,2})일',
            example='운행일 6월 20일',
            notes='Classic "오늘 배달 내역" screen',
            priority=1,
        ),
        PatternSpec(
            name='baemin_dotted_datetime',
            pattern=r'(?P<year>\d{4})\.(?P<month>\d{1,2})\.(?P<day>\d{1,2})\.?\s*오[전후]',
            example='2025.06.20 오전 3:12',
            notes='Delivery summary screen',
            priority=2,
        ),
        _KOREAN_MONTH_DAY,
        _DOTTED_YMD,
    ],
    Platform.COUPANG: [
        PatternSpec(
            name='coupang_slash_weekday',
            pattern=r'(?<![\d/.])(?P<month>\d{1,2})/(?P<day>\d{1,2})(?![\d/])\s*\(?[월화수목금토일]',
            example='05/29 목',
            notes='Date header of the "내 수입" screen',
            priority=1,
        ),
        _SLASH_MONTH_DAY,
        _KOREAN_MONTH_DAY,
    ],
    Platform.OTHER: [],
}

GENERIC_DATE_PATTERNS: List[PatternSpec] = [
    PatternSpec(
        name='ymd',
        pattern=r'(?<!\d)(?P<year>\d{4})\s*[.\-/]\s*(?P<month>\d{1,2})\s*[.\-/]\s*(?P<day>\d{1,2})(?!\d)',
        example='2025-05-29',
        notes='Year-month-day with ".", "-" or "/"',
    ),
    PatternSpec(
        name='korean_ymd',
        pattern=r'(?P<year>\d{4})년\s*(?P<month>\d{1,2})월\s*(?P<day>\d{1,2})일',
        example='2025년 5월 29일',
    ),
    _KOREAN_MONTH_DAY,
    _SLASH_MONTH_DAY,
]


# ---------------------------------------------------------------------------
# Amounts and counts
# ---------------------------------------------------------------------------

AMOUNT_PATTERNS: Dict[Platform, List[PatternSpec]] = {
    Platform.BAEMIN: [
        PatternSpec(
            name='baemin_fee_total',
            pattern=rf'배\s*달\s*료\s*합\s*계\D{{0,20}}?(?P<amount>\d{{1,3}}(?:[,.]\d{{3}})+|\d{{4,}})',
            example='배달료 합계 53,920원',
            notes='Amount may sit on the following line',
            priority=1,
        ),
        PatternSpec(
            name='baemin_final_payout',
            pattern=rf'최\s*종\s*지\s*급\s*금\s*액\D{{0,20}}?(?P<amount>\d{{1,3}}(?:[,.]\d{{3}})+|\d{{4,}})',
            example='최종 지급 금액 412,300원',
            notes='Weekly settlement screen',
            priority=1,
        ),
        PatternSpec(
            name='baemin_delivery_fee',
            pattern=rf'배\s*달\s*료(?!\s*합)\D{{0,20}}?(?P<amount>{WON_NUMBER})\s*원',
            example='배달료 181,710원',
            notes='Delivery summary screen',
            priority=2,
        ),
    ],
    Platform.COUPANG: [
        PatternSpec(
            name='coupang_total_fee',
            pattern=rf'총\s*배\s*달\s*수\s*수\s*료\D{{0,20}}?(?P<amount>\d{{1,3}}(?:[,.]\d{{3}})+|\d{{4,}})',
            example='총 배달 수수료 53,920원',
            priority=1,
        ),
        PatternSpec(
            name='coupang_my_income',
            pattern=rf'내\s*수\s*입\D{{0,20}}?(?P<amount>{WON_NUMBER})\s*원',
            example='내 수입 53,920원',
            priority=2,
        ),
    ],
    Platform.OTHER: [],
}

GENERIC_AMOUNT_PATTERNS: List[PatternSpec] = [
    PatternSpec(
        name='won_suffixed',
        pattern=_AMOUNT,
        example='53,920원',
        notes='First won-suffixed number (totals are shown at the top)',
        priority=3,
    ),
]

COUNT_PATTERNS: Dict[Platform, List[PatternSpec]] = {
    Platform.BAEMIN: [
        PatternSpec(
            name='baemin_delivery_count',
            pattern=r'배\s*달\s*건\s*수?\D{0,10}?(?P<count>\d+)\s*건?',
            example='배달건 39건',
            priority=1,
        ),
    ],
    Platform.COUPANG: [
        PatternSpec(
            name='coupang_delivery_count',
            pattern=r'배\s*달\s*(?P<count>\d+)\s*건',
            example='배달 17건',
            priority=1,
        ),
        PatternSpec(
            name='coupang_ocr_count',
            pattern=r'H[iIl1]E\s*(?P<count>\d+)',
            example='HiE 17',
            notes='"배달" misread by Tesseract',
            priority=2,
        ),
    ],
    Platform.OTHER: [],
}

GENERIC_COUNT_PATTERNS: List[PatternSpec] = [
    PatternSpec(
        name='count_suffixed',
        pattern=_COUNT,
        example='17건',
        priority=3,
    ),
    PatternSpec(
        name='count_labelled',
        pattern=r'배\s*달\s*(?:건\s*수?)?\s*:?\s*(?P<count>\d+)(?![\d,.])',
        example='배달건수: 17',
        notes='Label precedes the number',
        priority=4,
    ),
]


# ---------------------------------------------------------------------------
# Daily breakdown lines
# ---------------------------------------------------------------------------

# A line is matched in two steps: the leading date, then the figures in the
# remainder of the line. No pattern spans both, so matching stays linear.

_YMD_LINE = PatternSpec(
    name='ymd',
    pattern=r'(?<!\d)(?P<year>\d{4})[.\-/](?P<month>\d{1,2})[.\-/](?P<day>\d{1,2})(?!\d)\.?',
    example='2025.2.19 54,800원 13건',
)

_KOREAN_MD_LINE = PatternSpec(
    name='korean_md',
    pattern=r'(?P<month>\d{1,2})월\s*(?P<day>\d{1,2})일',
    example='2월 19일 54,800원 13건',
)

_SLASH_MD_LINE = PatternSpec(
    name='slash_md',
    pattern=r'(?<![\d/.])(?P<month>\d{1,2})/(?P<day>\d{1,2})(?![\d/])',
    example='5/19 (월) 32,000원 8건',
)

_DOTTED_MD_LINE = PatternSpec(
    name='dotted_md',
    pattern=r'(?<![\d.,])(?P<month>\d{1,2})\.(?P<day>\d{1,2})(?![\d.,]|\s*km)',
    example='2.19 54,800원 13건',
    notes='Pairs with the "2.19 ~ 2.25" weekly header',
)

# Groups: year?, month, day
BREAKDOWN_LINE_DATES: Dict[Platform, List[PatternSpec]] = {
    Platform.BAEMIN: [_YMD_LINE, _KOREAN_MD_LINE, _DOTTED_MD_LINE],
    Platform.COUPANG: [_SLASH_MD_LINE, _YMD_LINE, _KOREAN_MD_LINE, _DOTTED_MD_LINE],
    Platform.OTHER: [_YMD_LINE, _KOREAN_MD_LINE, _SLASH_MD_LINE, _DOTTED_MD_LINE],
}

LINE_AMOUNT = PatternSpec(
    name='line_amount',
    pattern=_AMOUNT,
    example='54,800원',
)

LINE_COUNT = PatternSpec(
    name='line_count',
    pattern=_COUNT,
    example='13건',
)
