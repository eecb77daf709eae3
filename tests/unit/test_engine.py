"""Tests for engine initialization and transactional scope."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from retail_kernel.db import engine as db_engine
from retail_kernel.db.engine import (
    build_engine,
    create_tables,
    get_engine,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from retail_kernel.models import Register


@pytest.fixture
def module_engine(tmp_path):
    reset_engine()
    engine = init_engine_from_url(f"sqlite:///{tmp_path / 'engine.db'}")
    create_tables()
    yield engine
    reset_engine()


class TestEngineLifecycle:

    def test_uninitialized_engine_raises(self):
        reset_engine()
        with pytest.raises(RuntimeError):
            get_engine()
        with pytest.raises(RuntimeError):
            get_session_factory()

    def test_init_and_reset(self, module_engine):
        assert get_engine() is module_engine
        assert module_engine.dialect.name == "sqlite"
        reset_engine()
        assert db_engine._engine is None

    def test_sqlite_pragmas_applied(self, module_engine):
        with module_engine.connect() as conn:
            assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1
            assert conn.exec_driver_sql("PRAGMA journal_mode").scalar() == "wal"


class TestSessionScope:

    def test_commits_on_success(self, module_engine):
        with session_scope() as session:
            session.add(Register(code="CASH", name="Cash", is_cash=True))

        with session_scope() as session:
            assert session.execute(select(func.count(Register.id))).scalar() == 1

    def test_rolls_back_on_error(self, module_engine):
        with pytest.raises(ValueError):
            with session_scope() as session:
                session.add(Register(code="CASH", name="Cash", is_cash=True))
                session.flush()
                raise ValueError("abort")

        with session_scope() as session:
            assert session.execute(select(func.count(Register.id))).scalar() == 0

    def test_explicit_factory_bypasses_module_engine(self, tmp_path):
        reset_engine()
        engine = build_engine(f"sqlite:///{tmp_path / 'side.db'}")
        create_tables(engine)
        factory = sessionmaker(bind=engine, expire_on_commit=False)

        with session_scope(factory) as session:
            session.add(Register(code="CARD", name="Card", is_cash=False))

        with session_scope(factory) as session:
            assert session.execute(select(func.count(Register.id))).scalar() == 1
        with pytest.raises(RuntimeError):
            get_session_factory()
        engine.dispose()
