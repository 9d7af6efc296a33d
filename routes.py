"""
Personal Planner - 라우트 정의
"""
import re
import logging
from datetime import datetime

from flask import Blueprint, jsonify, redirect, render_template, request, url_for

from config import Config
from models import ADD, EDIT, EditSession, SlotKey
from services import calendar_service, timetable_service
from services.note_service import get_note_book
from services.timetable_service import get_slot_board, validate_time
from utils.error_handlers import NotFound, handle_errors

logger = logging.getLogger(__name__)

main_bp = Blueprint('main', __name__)
api_bp = Blueprint('api', __name__, url_prefix='/api')

# 입력 검증 유틸리티
DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def _sanitize(text, max_len=200):
    return str(text).strip()[:max_len] if text is not None else ''


def _field(data, key, default=''):
    """JSON 필드를 문자열로 (None → default)"""
    value = data.get(key)
    return default if value is None else str(value)


def _valid_cell(day, slot):
    return day in Config.DAYS and validate_time(slot)


def _strict_date(value):
    """API용 날짜 파싱 (실패 시 ValueError)"""
    if not value or not DATE_RE.match(value):
        raise ValueError("날짜 형식이 올바르지 않습니다. (YYYY-MM-DD)")
    return datetime.strptime(value, '%Y-%m-%d').date()


def _json_body():
    data = request.get_json(silent=True)
    if not data:
        raise ValueError("요청 데이터가 없습니다.")
    if not isinstance(data, dict):
        raise ValueError("요청 데이터는 JSON 객체여야 합니다.")
    return data


def _require_cell(day, slot):
    if day not in Config.DAYS:
        raise ValueError(f"요일은 {', '.join(Config.DAYS)} 중 하나여야 합니다.")
    if not validate_time(slot):
        raise ValueError("시간 형식이 올바르지 않습니다. (HH:MM)")


# ===== 페이지 라우트 =====

@main_bp.route('/')
def index():
    return redirect(url_for('main.calendar_page'))


@main_bp.route('/calendar')
def calendar_page():
    """월간 캘린더 + 선택 날짜 메모"""
    selected = calendar_service.parse_date(request.args.get('date'))
    month = calendar_service.parse_month(request.args.get('month'), default=selected)
    note_book = get_note_book()

    session = None
    if request.args.get('add'):
        session = EditSession(target=selected, mode=ADD, form={"text": ""})
    elif request.args.get('note', '').isdecimal():
        index = int(request.args['note'])
        text = note_book.get(selected, index)
        if text is not None:
            session = EditSession(target=selected, mode=EDIT, form={"text": text}, record_id=index)

    view = calendar_service.month_view(
        month, selected=selected, note_counts=note_book.note_counts()
    )
    return render_template(
        'calendar.html',
        view=view,
        selected=selected,
        notes=note_book.notes_for(selected),
        session=session,
    )


@main_bp.route('/calendar/notes', methods=['POST'])
def save_note():
    """메모 모달 저장/삭제 후 캘린더로 복귀"""
    selected = calendar_service.parse_date(request.form.get('date'))
    month = request.form.get('month') or selected.strftime('%Y-%m')
    action = request.form.get('action', 'save')
    index = request.form.get('index', '')
    text = request.form.get('text', '')
    note_book = get_note_book()

    if action == 'delete' and index.isdecimal():
        note_book.delete(selected, int(index))
    elif action == 'save':
        if index.isdecimal():
            note_book.edit(selected, int(index), text)
        else:
            note_book.add(selected, text)

    return redirect(url_for('main.calendar_page', month=month, date=selected.isoformat()))


@main_bp.route('/timetable')
def timetable_page():
    """할일형 시간표 (여러 할일/셀, 편집 모드 잠금)"""
    edit_mode = request.args.get('edit') == '1'
    tasks = timetable_service.fetch_tasks()
    grouped = timetable_service.group_tasks(tasks)

    session = None
    confirm_task = None
    day, slot = request.args.get('day', ''), request.args.get('slot', '')
    if edit_mode and _valid_cell(day, slot):
        task_id = request.args.get('task_id')
        task = next((t for t in tasks if t.id == task_id), None) if task_id else None
        session = timetable_service.open_task_session(day, slot, task)
    confirm_id = request.args.get('confirm_delete')
    if edit_mode and confirm_id:
        confirm_task = next((t for t in tasks if t.id == confirm_id), None)

    return render_template(
        'timetable.html',
        days=Config.DAYS,
        slots=list(get_slot_board()),
        grouped=grouped,
        edit_mode=edit_mode,
        session=session,
        confirm_task=confirm_task,
    )


@main_bp.route('/timetable/tasks', methods=['POST'])
def save_task():
    """할일 모달 저장 (빈 제목은 무시)"""
    day, slot = request.form.get('day', ''), request.form.get('slot', '')
    if _valid_cell(day, slot):
        task_id = request.form.get('task_id') or None
        session = EditSession(
            target=SlotKey(day, slot),
            mode=EDIT if task_id else ADD,
            form={
                "title": _sanitize(request.form.get('title'), 100),
                "comment": _sanitize(request.form.get('comment'), 500),
                "reminder": request.form.get('reminder', ''),
            },
            record_id=task_id,
        )
        timetable_service.save_task(session)
    else:
        logger.warning(f"잘못된 셀 무시: {day!r} / {slot!r}")
    return redirect(url_for('main.timetable_page', edit=1))


@main_bp.route('/timetable/tasks/<task_id>/delete', methods=['POST'])
def delete_task(task_id):
    timetable_service.delete_task(task_id)
    return redirect(url_for('main.timetable_page', edit=1))


@main_bp.route('/timetable/slots', methods=['POST'])
def add_slot():
    get_slot_board().add(request.form.get('slot', ''))
    return redirect(url_for('main.timetable_page', edit=1))


@main_bp.route('/timetable/slots/delete', methods=['POST'])
def remove_slot():
    get_slot_board().remove(request.form.get('slot', ''))
    return redirect(url_for('main.timetable_page', edit=1))


@main_bp.route('/blocks')
def blocks_page():
    """블록형 시간표 (셀당 블록 하나)"""
    blocks = timetable_service.index_blocks(timetable_service.fetch_blocks())

    session = None
    day, slot = request.args.get('day', ''), request.args.get('slot', '')
    if _valid_cell(day, slot):
        session = timetable_service.open_block_session(day, slot, blocks.get(SlotKey(day, slot)))

    return render_template(
        'blocks.html',
        days=Config.DAYS,
        slots=Config.BLOCK_TIME_SLOTS,
        blocks=blocks,
        session=session,
    )


@main_bp.route('/blocks', methods=['POST'])
def save_block():
    """블록 모달 저장 (빈 과목명은 무시)"""
    day, slot = request.form.get('day', ''), request.form.get('slot', '')
    if _valid_cell(day, slot):
        block_id = request.form.get('block_id') or None
        session = EditSession(
            target=SlotKey(day, slot),
            mode=EDIT if block_id else ADD,
            form={
                "subject": _sanitize(request.form.get('subject'), 100),
                "room": _sanitize(request.form.get('room'), 50),
                "teacher": _sanitize(request.form.get('teacher'), 50),
                "comment": _sanitize(request.form.get('comment'), 500),
                "reminder": request.form.get('reminder', ''),
            },
            record_id=block_id,
        )
        timetable_service.save_block(session)
    else:
        logger.warning(f"잘못된 셀 무시: {day!r} / {slot!r}")
    return redirect(url_for('main.blocks_page'))


@main_bp.route('/blocks/<block_id>/delete', methods=['POST'])
def delete_block(block_id):
    timetable_service.delete_block(block_id)
    return redirect(url_for('main.blocks_page'))


# ===== API 라우트 =====

@api_bp.route('/calendar/grid', methods=['GET'])
@handle_errors
def get_calendar_grid():
    """월간 그리드 JSON (overflow 표시 포함)"""
    month = calendar_service.parse_month(request.args.get('month'))
    week_start = request.args.get('week_start')
    week_start = int(week_start) if week_start not in (None, '') else Config.WEEK_START
    selected = request.args.get('date')
    view = calendar_service.month_view(
        month,
        selected=_strict_date(selected) if selected else None,
        week_start=week_start,
        note_counts=get_note_book().note_counts(),
    )
    return jsonify({"success": True, **view.to_dict()})


@api_bp.route('/notes/<day>', methods=['GET'])
@handle_errors
def get_notes(day):
    day = _strict_date(day)
    return jsonify({"success": True, "date": day.isoformat(), "notes": get_note_book().notes_for(day)})


@api_bp.route('/notes/<day>', methods=['POST'])
@handle_errors
def add_note(day):
    day = _strict_date(day)
    text = _field(_json_body(), 'text')
    if not get_note_book().add(day, text):
        raise ValueError("메모 내용을 입력해주세요.")
    return jsonify({"success": True, "notes": get_note_book().notes_for(day)}), 201


@api_bp.route('/notes/<day>/<int:index>', methods=['PUT'])
@handle_errors
def edit_note(day, index):
    day = _strict_date(day)
    text = _field(_json_body(), 'text')
    note_book = get_note_book()
    if note_book.get(day, index) is None:
        raise NotFound("메모를 찾을 수 없습니다.")
    if not note_book.edit(day, index, text):
        raise ValueError("메모 내용을 입력해주세요.")
    return jsonify({"success": True, "notes": note_book.notes_for(day)})


@api_bp.route('/notes/<day>/<int:index>', methods=['DELETE'])
@handle_errors
def delete_note(day, index):
    day = _strict_date(day)
    if not get_note_book().delete(day, index):
        raise NotFound("메모를 찾을 수 없습니다.")
    return jsonify({"success": True, "notes": get_note_book().notes_for(day)})


@api_bp.route('/tasks', methods=['GET'])
@handle_errors
def get_tasks():
    tasks = timetable_service.fetch_tasks()
    return jsonify({"success": True, "tasks": [t.to_dict() for t in tasks]})


@api_bp.route('/tasks', methods=['POST'])
@handle_errors
def create_task():
    data = _json_body()
    day, slot = _field(data, 'day'), _field(data, 'time_slot')
    _require_cell(day, slot)
    title = _sanitize(data.get('title'), 100)
    if not title:
        raise ValueError("제목을 입력해주세요.")

    session = timetable_service.open_task_session(day, slot)
    session.form.update({
        "title": title,
        "comment": _sanitize(data.get('comment'), 500),
        "reminder": _field(data, 'reminder'),
    })
    task_id = timetable_service.save_task(session)
    if not task_id:
        return jsonify({"success": False, "error": "할일 저장에 실패했습니다."}), 500
    logger.info(f"할일 추가: {day} {slot} / {title}")
    return jsonify({"success": True, "task_id": task_id}), 201


@api_bp.route('/tasks/<task_id>', methods=['PUT'])
@handle_errors
def update_task(task_id):
    data = _json_body()
    task = timetable_service.find_task(task_id)
    if task is None:
        raise NotFound("할일을 찾을 수 없습니다.")

    day, slot = _field(data, 'day', task.day), _field(data, 'time_slot', task.time_slot)
    _require_cell(day, slot)
    session = timetable_service.open_task_session(day, slot, task)
    for key in ('title', 'comment', 'reminder'):
        if key in data:
            session.form[key] = _sanitize(data[key], 500) if key != 'reminder' else _field(data, key)
    if not session.form['title'].strip():
        raise ValueError("제목을 입력해주세요.")

    if not timetable_service.save_task(session):
        return jsonify({"success": False, "error": "할일 수정에 실패했습니다."}), 500
    return jsonify({"success": True, "task_id": task_id})


@api_bp.route('/tasks/<task_id>', methods=['DELETE'])
@handle_errors
def remove_task(task_id):
    if not timetable_service.delete_task(task_id):
        raise NotFound("할일을 찾을 수 없습니다.")
    logger.info(f"할일 삭제: {task_id}")
    return jsonify({"success": True})


@api_bp.route('/blocks', methods=['GET'])
@handle_errors
def get_blocks():
    blocks = timetable_service.fetch_blocks()
    return jsonify({"success": True, "blocks": [b.to_dict() for b in blocks]})


@api_bp.route('/blocks', methods=['POST'])
@handle_errors
def create_block():
    data = _json_body()
    day, slot = _field(data, 'day'), _field(data, 'start_time')
    _require_cell(day, slot)
    subject = _sanitize(data.get('subject'), 100)
    if not subject:
        raise ValueError("과목명을 입력해주세요.")

    session = timetable_service.open_block_session(day, slot)
    session.form.update({
        "subject": subject,
        "room": _sanitize(data.get('room'), 50),
        "teacher": _sanitize(data.get('teacher'), 50),
        "comment": _sanitize(data.get('comment'), 500),
        "reminder": _field(data, 'reminder'),
    })
    block_id = timetable_service.save_block(session)
    if not block_id:
        return jsonify({"success": False, "error": "블록 저장에 실패했습니다."}), 500
    logger.info(f"블록 추가: {day} {slot} / {subject}")
    return jsonify({"success": True, "block_id": block_id}), 201


@api_bp.route('/blocks/<block_id>', methods=['PUT'])
@handle_errors
def update_block(block_id):
    data = _json_body()
    block = timetable_service.find_block(block_id)
    if block is None:
        raise NotFound("블록을 찾을 수 없습니다.")

    session = timetable_service.open_block_session(block.day, block.start_time, block)
    for key in ('subject', 'room', 'teacher', 'comment'):
        if key in data:
            session.form[key] = _sanitize(data[key], 500)
    if 'reminder' in data:
        session.form['reminder'] = _field(data, 'reminder')
    if not session.form['subject'].strip():
        raise ValueError("과목명을 입력해주세요.")

    if not timetable_service.save_block(session):
        return jsonify({"success": False, "error": "블록 수정에 실패했습니다."}), 500
    return jsonify({"success": True, "block_id": block_id})


@api_bp.route('/blocks/<block_id>', methods=['DELETE'])
@handle_errors
def remove_block(block_id):
    if not timetable_service.delete_block(block_id):
        raise NotFound("블록을 찾을 수 없습니다.")
    logger.info(f"블록 삭제: {block_id}")
    return jsonify({"success": True})


@api_bp.route('/timeslots', methods=['GET'])
def get_timeslots():
    return jsonify({"success": True, "slots": list(get_slot_board())})


@api_bp.route('/timeslots', methods=['POST'])
@handle_errors
def add_timeslot():
    slot = _field(_json_body(), 'slot')
    board = get_slot_board()
    if slot in board:
        raise ValueError("이미 있는 시간대입니다.")
    if not board.add(slot):
        raise ValueError("시간 형식이 올바르지 않습니다. (HH:MM)")
    return jsonify({"success": True, "slots": list(board)}), 201


@api_bp.route('/timeslots/<slot>', methods=['DELETE'])
@handle_errors
def remove_timeslot(slot):
    board = get_slot_board()
    if not board.remove(slot):
        raise NotFound("시간대를 찾을 수 없습니다.")
    return jsonify({"success": True, "slots": list(board)})
