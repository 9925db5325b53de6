from pathlib import Path

from src.hojaverde.hojaverde.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use

REPO_ROOT = Path(__file__).resolve().parents[2]


def test_semicolons_inside_quotes_do_not_split():
    sql = "INSERT INTO t VALUES ('a;b');\nINSERT INTO t VALUES ('it\\'s;');\nSELECT 1"
    assert list(_iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        "INSERT INTO t VALUES ('it\\'s;')",
        "SELECT 1",
    ]


def test_schema_file_drops_database_statements():
    sql = _strip_create_db_and_use((REPO_ROOT / "database" / "schema.sql").read_text(encoding="utf-8"))
    statements = list(_iter_sql_statements(sql))

    assert not any(s.upper().startswith("USE ") for s in statements)
    assert len(statements) == 5
    assert any("uq_attendance_employee_date" in s for s in statements)


def test_seed_file_parses():
    statements = list(_iter_sql_statements((REPO_ROOT / "database" / "seed.sql").read_text(encoding="utf-8")))
    assert len(statements) == 2


def test_line_comments_are_dropped_even_with_quotes_inside():
    sql = (
        "-- the worker's area; defaults below\n"
        "INSERT INTO t VALUES ('a--b');\n"
        "SELECT 1; -- don't split here; nor here\n"
        "SELECT 2;\n"
        "-- trailing note\n"
    )
    assert list(_iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a--b')",
        "SELECT 1",
        "SELECT 2",
    ]
