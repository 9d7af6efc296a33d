"""공용 테스트 픽스처 - 임시 데이터 디렉토리 기반 앱"""

from datetime import timedelta

import pytest

from config import Config
from services.cosmos_service import reset_storage
from services.note_service import reset_note_book
from services.timetable_service import reset_slot_board


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """매 테스트마다 로컬 JSON 저장소와 메모리 싱글턴을 새로 만든다."""
    monkeypatch.setattr(Config, "DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setattr(Config, "STORE_FILE", str(tmp_path / "data" / "store.json"))
    monkeypatch.setattr(Config, "LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setattr(Config, "COSMOS_DB_ENDPOINT", None)
    monkeypatch.setattr(Config, "COSMOS_DB_KEY", None)
    monkeypatch.setattr(Config, "WEEK_START", 6)
    monkeypatch.setattr(Config, "TIMEZONE_OFFSET", timedelta(hours=9))
    reset_storage()
    reset_note_book()
    reset_slot_board()
    yield
    reset_storage()
    reset_note_book()
    reset_slot_board()


@pytest.fixture
def app():
    from app import create_app

    flask_app = create_app(Config)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
