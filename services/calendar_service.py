"""
월간 캘린더 그리드 생성 서비스
"""
import calendar
import logging
from datetime import date, datetime, timedelta

from config import Config
from models import DayCell, MonthView

logger = logging.getLogger(__name__)

WEEKDAY_ABBR = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    return value


def _check_week_start(week_start):
    if week_start not in range(7):
        raise ValueError(f"week_start는 0(월)~6(일) 사이여야 합니다: {week_start!r}")


def month_bounds(reference):
    """기준 날짜가 속한 달의 (첫날, 마지막날)"""
    reference = _as_date(reference)
    last_day = calendar.monthrange(reference.year, reference.month)[1]
    return reference.replace(day=1), reference.replace(day=last_day)


def week_start_of(d, week_start):
    """d를 포함하는 주의 시작일"""
    return d - timedelta(days=(d.weekday() - week_start) % 7)


def month_grid(reference, week_start=None):
    """기준 날짜의 달을 덮는 주 단위 날짜 행렬 반환

    앞뒤 overflow 날짜를 포함해 항상 7일 단위의 완전한 주로 채운다.
    """
    if week_start is None:
        week_start = Config.WEEK_START
    _check_week_start(week_start)

    month_start, month_end = month_bounds(reference)
    grid_start = week_start_of(month_start, week_start)
    grid_end = week_start_of(month_end, week_start) + timedelta(days=6)

    weeks = []
    day = grid_start
    while day <= grid_end:
        weeks.append([day + timedelta(days=i) for i in range(7)])
        day += timedelta(days=7)
    return weeks


def weekday_labels(week_start=None):
    """주 시작 요일 기준 요일 헤더 ("Sun" ... "Sat")"""
    if week_start is None:
        week_start = Config.WEEK_START
    _check_week_start(week_start)
    return [WEEKDAY_ABBR[(week_start + i) % 7] for i in range(7)]


def shift_month(reference, months):
    """months 만큼 떨어진 달의 첫날 (음수 허용)"""
    reference = _as_date(reference)
    index = reference.year * 12 + (reference.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_view(reference, selected=None, today=None, week_start=None, note_counts=None):
    """렌더링용 MonthView 생성 (overflow/선택/오늘 표시 포함)"""
    if week_start is None:
        week_start = Config.WEEK_START
    reference = _as_date(reference)
    selected = _as_date(selected)
    today = _as_date(today) or date.today()
    note_counts = note_counts or {}

    month_start, _ = month_bounds(reference)
    weeks = []
    for row in month_grid(reference, week_start):
        weeks.append([
            DayCell(
                date=d,
                in_month=(d.year, d.month) == (month_start.year, month_start.month),
                is_selected=d == selected,
                is_today=d == today,
                note_count=note_counts.get(d, 0),
            )
            for d in row
        ])

    return MonthView(
        month_start=month_start,
        title=month_start.strftime("%B %Y"),
        weekday_labels=weekday_labels(week_start),
        weeks=weeks,
        prev_month=shift_month(month_start, -1),
        next_month=shift_month(month_start, 1),
    )


def parse_month(value, default=None):
    """"YYYY-MM" 파싱, 실패 시 default(기본: 오늘)의 달 첫날"""
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except (TypeError, ValueError):
        if value:
            logger.warning(f"잘못된 월 형식 무시: {value!r}")
        return (default or date.today()).replace(day=1)


def parse_date(value, default=None):
    """"YYYY-MM-DD" 파싱, 실패 시 default(기본: 오늘)"""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        if value:
            logger.warning(f"잘못된 날짜 형식 무시: {value!r}")
        return default or date.today()
