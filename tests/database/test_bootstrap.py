from src.geosales.geosales.core.enums import Role
from src.geosales.geosales.database.bootstrap import (
    SCHEMA_PATH,
    _strip_create_db_and_use,
    _strip_line_comments,
    iter_sql_statements,
)
from src.geosales.geosales.database.connection import DBConfig
from src.geosales.geosales.database.seed import seed_users
from src.geosales.geosales.users.memory_user_repository import InMemoryUserRepository


def test_statements_split_outside_quotes():
    sql = "INSERT INTO t VALUES ('a;b');\nINSERT INTO t VALUES (\"it\\\"s;\");\n\nSELECT 1"
    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        'INSERT INTO t VALUES ("it\\"s;")',
        "SELECT 1",
    ]


def test_database_selection_is_stripped():
    sql = "CREATE DATABASE IF NOT EXISTS foo;\nUSE foo;\n-- tables\nCREATE TABLE a (id INT);"
    cleaned = _strip_line_comments(_strip_create_db_and_use(sql))
    assert list(iter_sql_statements(cleaned)) == ["CREATE TABLE a (id INT)"]


def test_schema_file_defines_all_tables():
    sql = _strip_line_comments(_strip_create_db_and_use(SCHEMA_PATH.read_text(encoding="utf-8")))
    creates = [s for s in iter_sql_statements(sql) if s.upper().startswith("CREATE TABLE")]
    assert len(creates) == 3
    for table in ("users", "attendance_records", "meetings"):
        assert any(table in s for s in creates)


def test_db_config_defaults():
    cfg = DBConfig.from_mapping({"user": "app"})
    assert cfg.user == "app"
    assert cfg.database == "geosales_db"


def test_seed_is_idempotent():
    users = InMemoryUserRepository()
    assert seed_users(users, radius_meters=5000) == 3
    assert seed_users(users, radius_meters=5000) == 0

    rahul = users.get_by_employee_id("EMP-MUM-001")
    assert rahul.role == Role.SALESMAN
    assert rahul.territory.radius_meters == 5000
    assert users.get_by_employee_id("admin@mumbai.com").role == Role.ADMIN
