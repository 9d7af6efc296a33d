"""
캘린더 날짜별 메모 (프로세스 메모리 전용, 원격 저장 없음)
"""
import logging
import threading
from datetime import datetime

logger = logging.getLogger(__name__)

_note_book = None


def get_note_book():
    """메모장 싱글턴 인스턴스 반환"""
    global _note_book
    if _note_book is None:
        _note_book = NoteBook()
    return _note_book


def reset_note_book():
    global _note_book
    _note_book = None


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    return value


class NoteBook:
    """날짜(date) → 메모 문자열 목록"""

    def __init__(self):
        self._notes = {}
        self._lock = threading.Lock()

    def notes_for(self, day):
        with self._lock:
            return list(self._notes.get(_as_date(day), []))

    def note_counts(self):
        """메모가 있는 날짜별 개수 (캘린더 셀 배지용)"""
        with self._lock:
            return {d: len(items) for d, items in self._notes.items()}

    def get(self, day, index):
        with self._lock:
            items = self._notes.get(_as_date(day), [])
            if 0 <= index < len(items):
                return items[index]
            return None

    def add(self, day, text):
        """메모 추가 (빈 문자열은 무시)"""
        if not text or not text.strip():
            return False
        day = _as_date(day)
        with self._lock:
            self._notes.setdefault(day, []).append(text)
        logger.info(f"메모 추가: {day.isoformat()}")
        return True

    def edit(self, day, index, text):
        """index 위치 메모 수정"""
        if not text or not text.strip():
            return False
        with self._lock:
            items = self._notes.get(_as_date(day))
            if not items or not 0 <= index < len(items):
                return False
            items[index] = text
        return True

    def delete(self, day, index):
        """index 위치 메모 삭제, 비면 날짜 키 제거"""
        day = _as_date(day)
        with self._lock:
            items = self._notes.get(day)
            if not items or not 0 <= index < len(items):
                return False
            del items[index]
            if not items:
                del self._notes[day]
        logger.info(f"메모 삭제: {day.isoformat()} #{index}")
        return True
