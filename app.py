"""
Personal Planner - 월간 캘린더 메모 + 시간표 그리드
"""
import os
import logging
from logging.handlers import RotatingFileHandler
from dotenv import load_dotenv

load_dotenv()

from flask import Flask
from config import Config
from routes import main_bp, api_bp


def setup_logging(config):
    """파일(회전) + 콘솔 로그 설정"""
    os.makedirs(config.LOG_DIR, exist_ok=True)
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    file_handler = RotatingFileHandler(
        os.path.join(config.LOG_DIR, 'planner.log'),
        maxBytes=1024 * 1024, backupCount=5, encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(config.LOG_LEVEL)
    for handler in list(root.handlers):
        if getattr(handler, '_planner_handler', False):
            root.removeHandler(handler)
            handler.close()
    for handler in (file_handler, console_handler):
        handler._planner_handler = True
        root.addHandler(handler)


def create_app(config_object=Config):
    """Flask 애플리케이션 팩토리"""
    app = Flask(__name__)
    app.config.from_object(config_object)

    # 필수 디렉토리 생성
    os.makedirs(config_object.DATA_DIR, exist_ok=True)
    setup_logging(config_object)

    # Blueprint 등록
    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp)

    # 보안 헤더
    @app.after_request
    def set_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        response.headers['Content-Security-Policy'] = (
            "default-src 'self'; "
            "script-src 'self' 'unsafe-inline' https://cdn.tailwindcss.com; "
            "style-src 'self' 'unsafe-inline' https://cdn.tailwindcss.com; "
            "img-src 'self' data:; "
            "connect-src 'self'"
        )
        return response

    return app


# Azure WebApp 호환을 위한 전역 인스턴스
app = create_app()


def main():
    """메인 실행 함수"""
    logger = logging.getLogger(__name__)
    storage = "Azure Cosmos DB" if Config.use_cosmos_db() else "로컬 JSON 파일"
    logger.info(f"Personal Planner 시작: http://localhost:{Config.PORT}/ (저장소: {storage})")

    if Config.DEBUG:
        app.run(debug=True, host=Config.HOST, port=Config.PORT)
    else:
        from waitress import serve
        logger.info(f"Waitress 서버 시작 (포트: {Config.PORT})")
        serve(app, host=Config.HOST, port=Config.PORT)


if __name__ == '__main__':
    main()
