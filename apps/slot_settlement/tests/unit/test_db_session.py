from sqlalchemy import text

from slot_settlement.db.session import build_engine, build_session_factory


def test_build_engine_connects_to_sqlite() -> None:
    engine = build_engine("sqlite+pysqlite:///:memory:")

    assert engine.dialect.name == "sqlite"
    with engine.connect() as connection:
        assert connection.execute(text("SELECT 1")).scalar() == 1


def test_session_factory_keeps_rows_loaded_after_commit() -> None:
    factory = build_session_factory(build_engine("sqlite+pysqlite:///:memory:"))

    assert factory.kw["expire_on_commit"] is False
    assert factory.kw["autoflush"] is False
