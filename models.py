"""
Personal Planner - 데이터 모델
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, NamedTuple, Optional


class SlotKey(NamedTuple):
    """시간표 셀 키 (요일, 시간대)"""
    day: str                   # "Mon"
    slot: str                  # "09:00"


@dataclass(frozen=True)
class DayCell:
    """월간 그리드의 단일 날짜 칸"""
    date: date
    in_month: bool = True      # False = 이전/다음 달 overflow (흐리게 표시)
    is_selected: bool = False
    is_today: bool = False
    note_count: int = 0

    def to_dict(self):
        return {
            "date": self.date.isoformat(),
            "day": self.date.day,
            "in_month": self.in_month,
            "is_selected": self.is_selected,
            "is_today": self.is_today,
            "note_count": self.note_count,
        }


@dataclass
class MonthView:
    """월간 캘린더 렌더링 정보"""
    month_start: date
    title: str                 # "September 2025"
    weekday_labels: List[str]
    weeks: List[List[DayCell]]
    prev_month: date
    next_month: date

    def to_dict(self):
        return {
            "month": self.month_start.strftime("%Y-%m"),
            "title": self.title,
            "weekday_labels": list(self.weekday_labels),
            "weeks": [[c.to_dict() for c in week] for week in self.weeks],
            "prev_month": self.prev_month.strftime("%Y-%m"),
            "next_month": self.next_month.strftime("%Y-%m"),
        }


@dataclass
class TimetableTask:
    """시간표 셀의 할일 (한 셀에 여러 개 가능)"""
    day: str
    time_slot: str
    title: str
    comment: Optional[str] = None
    reminder: Optional[str] = None   # ISO-8601 UTC, 예: "2025-09-16T00:30:00Z"
    id: str = ""

    @property
    def key(self):
        return SlotKey(self.day, self.time_slot)

    @classmethod
    def from_dict(cls, d):
        return cls(
            day=d.get("day", ""),
            time_slot=d.get("time_slot", ""),
            title=d.get("title", ""),
            comment=d.get("comment"),
            reminder=d.get("reminder"),
            id=d.get("id", ""),
        )

    def to_dict(self):
        d = {
            "day": self.day,
            "time_slot": self.time_slot,
            "title": self.title,
            "comment": self.comment,
            "reminder": self.reminder,
        }
        if self.id:
            d["id"] = self.id
        return d


@dataclass
class TimeBlock:
    """블록형 시간표 셀 (셀당 하나)"""
    day: str
    start_time: str
    subject: str
    end_time: Optional[str] = None
    room: str = ""
    teacher: str = ""
    comment: str = ""
    reminder: Optional[str] = None
    id: str = ""

    @property
    def key(self):
        return SlotKey(self.day, self.start_time)

    @classmethod
    def from_dict(cls, d):
        return cls(
            day=d.get("day", ""),
            start_time=d.get("start_time", ""),
            subject=d.get("subject", ""),
            end_time=d.get("end_time"),
            room=d.get("room") or "",
            teacher=d.get("teacher") or "",
            comment=d.get("comment") or "",
            reminder=d.get("reminder"),
            id=d.get("id", ""),
        )

    def to_dict(self):
        d = {
            "day": self.day,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "subject": self.subject,
            "room": self.room,
            "teacher": self.teacher,
            "comment": self.comment,
            "reminder": self.reminder,
        }
        if self.id:
            d["id"] = self.id
        return d


ADD = "add"
EDIT = "edit"


@dataclass
class EditSession:
    """모달이 열려 있는 동안의 편집 상태 (닫히면 폐기)"""
    target: object             # date | SlotKey
    mode: str = ADD            # "add" | "edit"
    form: Dict[str, str] = field(default_factory=dict)
    record_id: Optional[object] = None   # 원격 레코드 id 또는 노트 index

    @property
    def is_edit(self):
        return self.mode == EDIT
