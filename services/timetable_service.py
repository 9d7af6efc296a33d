"""
시간표 서비스 - 요일 × 시간대 그리드, 할일/블록 CRUD, 편집 세션
"""
import re
import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone

from config import Config
from models import ADD, EDIT, EditSession, SlotKey, TimeBlock, TimetableTask
from services.cosmos_service import get_storage

logger = logging.getLogger(__name__)

TIME_RE = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')
LOCAL_INPUT_FORMAT = '%Y-%m-%dT%H:%M'

_slot_board = None


def validate_time(t):
    return bool(TIME_RE.match(t)) if t else False


def calculate_end_time(start_time_str, minutes=None):
    """시작 시간 + 블록 길이 → 종료 시간"""
    if minutes is None:
        minutes = Config.BLOCK_MINUTES
    h, m = map(int, start_time_str.split(':'))
    end = datetime(2000, 1, 1, h, m) + timedelta(minutes=minutes)
    return end.strftime('%H:%M')


# ===== 리마인더 변환 =====

def _local_tz():
    return timezone(Config.TIMEZONE_OFFSET)


def reminder_to_iso(value):
    """리마인더 입력값 → UTC ISO 문자열

    시간대 없는 값("YYYY-MM-DDTHH:MM")은 로컬 시간, 시간대가 있는 값은 그대로 UTC로 변환.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        logger.warning(f"리마인더 형식 오류 무시: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=_local_tz())
    return parsed.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def reminder_to_input(value):
    """저장된 ISO 문자열 → datetime-local 입력값 (로컬 시간)"""
    if not value:
        return ''
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        logger.warning(f"저장된 리마인더 형식 오류: {value!r}")
        return ''
    if parsed.tzinfo is None:
        return parsed.strftime(LOCAL_INPUT_FORMAT)
    return parsed.astimezone(_local_tz()).strftime(LOCAL_INPUT_FORMAT)


# ===== 시간대 목록 =====

def get_slot_board():
    """시간대 목록 싱글턴 (메모리 전용)"""
    global _slot_board
    if _slot_board is None:
        _slot_board = TimeSlotBoard()
    return _slot_board


def reset_slot_board():
    global _slot_board
    _slot_board = None


class TimeSlotBoard:
    """편집 가능한 시간대 목록 (추가 순서 유지, 중복 불가)"""

    def __init__(self, slots=None):
        self._defaults = list(slots if slots is not None else Config.DEFAULT_TIME_SLOTS)
        self.slots = list(self._defaults)

    def __iter__(self):
        return iter(self.slots)

    def __len__(self):
        return len(self.slots)

    def __contains__(self, slot):
        return slot in self.slots

    def add(self, slot):
        slot = (slot or '').strip()
        if not validate_time(slot):
            logger.warning(f"잘못된 시간대 형식: {slot!r}")
            return False
        if slot in self.slots:
            return False
        self.slots.append(slot)
        return True

    def remove(self, slot):
        if slot not in self.slots:
            return False
        self.slots.remove(slot)
        return True

    def reset(self):
        self.slots = list(self._defaults)


# ===== 그리드 구성 =====

def group_tasks(tasks):
    """(요일, 시간대) → 할일 목록"""
    grouped = defaultdict(list)
    for task in tasks:
        grouped[task.key].append(task)
    return dict(grouped)


def index_blocks(blocks):
    """(요일, 시작시간) → 블록 (중복 시 마지막 항목)"""
    return {block.key: block for block in blocks}


# ===== 할일 (timetable_tasks) =====

def fetch_tasks():
    rows = get_storage().select(Config.TASKS_TABLE)
    return [TimetableTask.from_dict(r) for r in rows]


def find_task(task_id):
    rows = get_storage().select(Config.TASKS_TABLE, id=task_id)
    return TimetableTask.from_dict(rows[0]) if rows else None


def open_task_session(day, slot, task=None):
    """할일 모달 편집 세션 (task 없으면 빈 폼)"""
    if task is None:
        return EditSession(
            target=SlotKey(day, slot),
            mode=ADD,
            form={"title": "", "comment": "", "reminder": ""},
        )
    return EditSession(
        target=SlotKey(day, slot),
        mode=EDIT,
        form={
            "title": task.title,
            "comment": task.comment or "",
            "reminder": reminder_to_input(task.reminder),
        },
        record_id=task.id,
    )


def task_payload(session):
    return {
        "day": session.target.day,
        "time_slot": session.target.slot,
        "title": session.form.get("title", ""),
        "comment": session.form.get("comment") or None,
        "reminder": reminder_to_iso(session.form.get("reminder")),
    }


def save_task(session):
    """편집 세션 저장: record_id 있으면 수정, 없으면 추가

    빈 제목은 조용히 무시한다. 저장 실패는 저장소에서 로그로 남긴다.
    """
    if not session.form.get("title", "").strip():
        return None
    storage = get_storage()
    payload = task_payload(session)
    if session.is_edit and session.record_id:
        return session.record_id if storage.update(Config.TASKS_TABLE, session.record_id, payload) else None
    return storage.insert(Config.TASKS_TABLE, payload)


def delete_task(task_id):
    if not task_id:
        return False
    return get_storage().delete(Config.TASKS_TABLE, task_id)


# ===== 블록 (timetable) =====

def fetch_blocks():
    rows = get_storage().select(Config.BLOCKS_TABLE)
    return [TimeBlock.from_dict(r) for r in rows]


def find_block(block_id):
    rows = get_storage().select(Config.BLOCKS_TABLE, id=block_id)
    return TimeBlock.from_dict(rows[0]) if rows else None


def open_block_session(day, slot, block=None):
    """블록 모달 편집 세션"""
    if block is None:
        return EditSession(
            target=SlotKey(day, slot),
            mode=ADD,
            form={"subject": "", "room": "", "teacher": "", "comment": "", "reminder": ""},
        )
    return EditSession(
        target=SlotKey(day, slot),
        mode=EDIT,
        form={
            "subject": block.subject,
            "room": block.room,
            "teacher": block.teacher,
            "comment": block.comment,
            "reminder": (block.reminder or "")[:16],
        },
        record_id=block.id,
    )


def save_block(session):
    """블록 저장: 수정은 폼 필드만, 추가는 요일/시작·종료 시간 포함"""
    form = session.form
    if not form.get("subject", "").strip():
        return None

    fields = {
        "subject": form.get("subject", ""),
        "room": form.get("room", ""),
        "teacher": form.get("teacher", ""),
        "comment": form.get("comment", ""),
        "reminder": form.get("reminder") or None,
    }
    storage = get_storage()
    if session.is_edit and session.record_id:
        return session.record_id if storage.update(Config.BLOCKS_TABLE, session.record_id, fields) else None

    start_time = session.target.slot
    fields.update({
        "day": session.target.day,
        "start_time": start_time,
        "end_time": calculate_end_time(start_time) if validate_time(start_time) else None,
    })
    return storage.insert(Config.BLOCKS_TABLE, fields)


def delete_block(block_id):
    if not block_id:
        return False
    return get_storage().delete(Config.BLOCKS_TABLE, block_id)
