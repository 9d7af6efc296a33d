"""
데이터 저장 서비스 - Azure Cosmos DB 또는 로컬 JSON fallback

테이블 이름 + 동등 비교 필터만 사용하는 단순 CRUD 표면:
select / insert / update / delete
"""
import os
import json
import re
import uuid
import logging
import threading
from datetime import datetime
from config import Config

logger = logging.getLogger(__name__)

_storage_instance = None

# store.json 읽기-수정-쓰기 직렬화 (waitress 다중 스레드)
_file_lock = threading.Lock()

FIELD_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


def _generate_id(prefix):
    """고유 레코드 ID 생성"""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    unique_id = str(uuid.uuid4())[:8]
    return f"{prefix}_{timestamp}_{unique_id}"


def get_storage():
    """저장소 싱글턴 인스턴스 반환"""
    global _storage_instance
    if _storage_instance is None:
        if Config.use_cosmos_db():
            _storage_instance = CosmosStorage()
        else:
            _storage_instance = LocalJsonStorage()
    return _storage_instance


def reset_storage():
    """싱글턴 해제 (설정 변경 후 재생성용)"""
    global _storage_instance
    _storage_instance = None


class LocalJsonStorage:
    """로컬 JSON 파일 기반 저장소 (개발용 fallback)"""

    def __init__(self, filepath=None):
        self.filepath = filepath or Config.STORE_FILE
        os.makedirs(os.path.dirname(self.filepath), exist_ok=True)
        if not os.path.exists(self.filepath):
            self._save_data({"tables": {}})
        logger.info("로컬 JSON 저장소 초기화 완료")

    def _load_data(self):
        try:
            with open(self.filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, FileNotFoundError):
            return {"tables": {}}
        data.setdefault("tables", {})
        return data

    def _save_data(self, data):
        with open(self.filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def select(self, table, **equals):
        """테이블 전체 또는 동등 조건에 맞는 레코드 목록"""
        try:
            with _file_lock:
                rows = self._load_data()["tables"].get(table, [])
        except OSError as e:
            logger.error(f"레코드 조회 실패: {table} / {e}")
            return []
        return [
            dict(r) for r in rows
            if all(r.get(k) == v for k, v in equals.items())
        ]

    def insert(self, table, fields):
        """레코드 추가 후 id 반환 (실패 시 None)"""
        try:
            with _file_lock:
                data = self._load_data()
                row = {k: v for k, v in fields.items() if k != 'id'}
                row['id'] = _generate_id(table)
                data["tables"].setdefault(table, []).append(row)
                self._save_data(data)
            logger.info(f"레코드 추가: {table} / {row['id']}")
            return row['id']
        except OSError as e:
            logger.error(f"레코드 추가 실패: {table} / {e}")
            return None

    def update(self, table, record_id, fields):
        """id로 레코드 필드 갱신"""
        try:
            with _file_lock:
                data = self._load_data()
                for row in data["tables"].get(table, []):
                    if row.get('id') == record_id:
                        row.update({k: v for k, v in fields.items() if k != 'id'})
                        self._save_data(data)
                        logger.info(f"레코드 수정: {table} / {record_id}")
                        return True
            return False
        except OSError as e:
            logger.error(f"레코드 수정 실패: {table} / {e}")
            return False

    def delete(self, table, record_id):
        """id로 레코드 삭제"""
        try:
            with _file_lock:
                data = self._load_data()
                rows = data["tables"].get(table, [])
                remaining = [r for r in rows if r.get('id') != record_id]
                if len(remaining) < len(rows):
                    data["tables"][table] = remaining
                    self._save_data(data)
                    logger.info(f"레코드 삭제: {table} / {record_id}")
                    return True
            return False
        except OSError as e:
            logger.error(f"레코드 삭제 실패: {table} / {e}")
            return False


class CosmosStorage:
    """Azure Cosmos DB 기반 저장소 (파티션 키 = 테이블 이름)"""

    def __init__(self, container=None):
        if container is None:
            from azure.cosmos import CosmosClient, PartitionKey
            self.client = CosmosClient(Config.COSMOS_DB_ENDPOINT, Config.COSMOS_DB_KEY)
            self.database = self.client.create_database_if_not_exists(id=Config.COSMOS_DATABASE_NAME)
            container = self.database.create_container_if_not_exists(
                id=Config.COSMOS_CONTAINER_NAME,
                partition_key=PartitionKey(path="/table")
            )
        self.container = container
        logger.info("Azure Cosmos DB 저장소 초기화 완료")

    @staticmethod
    def _strip(doc):
        """Cosmos 시스템 필드(_rid, _etag 등)와 table 필드 제거"""
        return {k: v for k, v in doc.items() if not k.startswith('_') and k != 'table'}

    def select(self, table, **equals):
        """테이블 전체 또는 동등 조건에 맞는 레코드 목록"""
        from azure.core.exceptions import AzureError

        query = 'SELECT * FROM c WHERE c["table"] = @table'
        parameters = [{"name": "@table", "value": table}]
        for i, (key, value) in enumerate(sorted(equals.items())):
            if not FIELD_RE.match(key):
                raise ValueError(f"잘못된 필드 이름: {key!r}")
            query += f' AND c["{key}"] = @v{i}'
            parameters.append({"name": f"@v{i}", "value": value})

        try:
            docs = self.container.query_items(
                query=query, parameters=parameters, partition_key=table
            )
            return [self._strip(d) for d in docs]
        except AzureError as e:
            logger.error(f"레코드 조회 실패: {table} / {e}")
            return []

    def insert(self, table, fields):
        """레코드 추가 후 id 반환 (실패 시 None)"""
        from azure.core.exceptions import AzureError

        record_id = _generate_id(table)
        doc = {
            **{k: v for k, v in fields.items() if k != 'id'},
            "id": record_id,
            "table": table,
        }
        try:
            self.container.create_item(body=doc)
            logger.info(f"레코드 추가: {table} / {record_id}")
            return record_id
        except AzureError as e:
            logger.error(f"레코드 추가 실패: {table} / {e}")
            return None

    def update(self, table, record_id, fields):
        """id로 레코드 필드 갱신"""
        from azure.core.exceptions import AzureError, ResourceNotFoundError

        try:
            doc = self.container.read_item(item=record_id, partition_key=table)
        except ResourceNotFoundError:
            return False
        except AzureError as e:
            logger.error(f"레코드 수정 실패: {table} / {e}")
            return False

        doc.update({k: v for k, v in fields.items() if k not in ('id', 'table')})
        try:
            self.container.replace_item(item=record_id, body=doc)
            logger.info(f"레코드 수정: {table} / {record_id}")
            return True
        except AzureError as e:
            logger.error(f"레코드 수정 실패: {table} / {e}")
            return False

    def delete(self, table, record_id):
        """id로 레코드 삭제"""
        from azure.core.exceptions import AzureError, ResourceNotFoundError

        try:
            self.container.delete_item(item=record_id, partition_key=table)
            logger.info(f"레코드 삭제: {table} / {record_id}")
            return True
        except ResourceNotFoundError:
            return False
        except AzureError as e:
            logger.error(f"레코드 삭제 실패: {table} / {e}")
            return False
