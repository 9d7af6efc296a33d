import os
import calendar
from datetime import timedelta

class Config:
    """애플리케이션 설정"""

    # 보안
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'personal-planner-secret-key'

    # 로컬 JSON 저장 (Cosmos DB fallback)
    DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')
    STORE_FILE = os.path.join(DATA_DIR, 'store.json')

    # Azure Cosmos DB
    COSMOS_DB_ENDPOINT = os.environ.get('COSMOS_DB_ENDPOINT')
    COSMOS_DB_KEY = os.environ.get('COSMOS_DB_KEY')
    COSMOS_DATABASE_NAME = os.environ.get('COSMOS_DATABASE_NAME', 'PersonalPlannerDB')
    COSMOS_CONTAINER_NAME = os.environ.get('COSMOS_CONTAINER_NAME', 'PlannerData')

    # 테이블 이름
    TASKS_TABLE = 'timetable_tasks'
    BLOCKS_TABLE = 'timetable'

    # 캘린더
    WEEK_START = int(os.environ.get('WEEK_START', calendar.SUNDAY))

    # 시간표 기본값
    DAYS = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri']
    DEFAULT_TIME_SLOTS = ['08:00', '09:00', '10:00']
    BLOCK_TIME_SLOTS = [
        '08:00', '09:00', '10:00', '11:00',
        '12:00', '13:00', '14:00', '15:00',
    ]
    BLOCK_MINUTES = 60

    # 시간대 (reminder 입력값 해석 기준)
    TIMEZONE_OFFSET = timedelta(hours=int(os.environ.get('TZ_OFFSET_HOURS', 9)))

    # 로그
    LOG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'logs')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # 서버
    HOST = '0.0.0.0'
    PORT = int(os.environ.get('PORT', 5000))
    DEBUG = os.environ.get('FLASK_ENV') == 'development'

    @classmethod
    def use_cosmos_db(cls):
        """Cosmos DB 사용 여부 판단"""
        return bool(cls.COSMOS_DB_ENDPOINT and cls.COSMOS_DB_KEY)
