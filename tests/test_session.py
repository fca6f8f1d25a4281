"""Tests for database startup in panel_planner.db.session."""

import subprocess
import threading

from panel_planner.db import session


class TestInitDb:
    async def test_migrations_run_off_the_event_loop(self, engine, monkeypatch):
        calls = []

        def fake_run(args, **kwargs):
            calls.append((args, threading.current_thread() is threading.main_thread()))
            return subprocess.CompletedProcess(args, 0)

        monkeypatch.setattr(session, "engine", engine)
        monkeypatch.setattr(session, "_db_available", False)
        monkeypatch.setattr(session.settings, "auto_migrate_on_startup", True)
        monkeypatch.setattr(session.subprocess, "run", fake_run)

        await session.init_db()

        assert calls == [(["alembic", "upgrade", "head"], False)]
        assert session.is_db_available()

    async def test_failed_migration_marks_db_unavailable(self, engine, monkeypatch):
        def fake_run(args, **kwargs):
            raise subprocess.CalledProcessError(1, args)

        monkeypatch.setattr(session, "engine", engine)
        monkeypatch.setattr(session, "_db_available", True)
        monkeypatch.setattr(session.settings, "auto_migrate_on_startup", True)
        monkeypatch.setattr(session.subprocess, "run", fake_run)

        await session.init_db()

        assert not session.is_db_available()

    async def test_no_migration_by_default(self, engine, monkeypatch):
        calls = []
        monkeypatch.setattr(session, "engine", engine)
        monkeypatch.setattr(session, "_db_available", False)
        monkeypatch.setattr(session.settings, "auto_migrate_on_startup", False)
        monkeypatch.setattr(session.subprocess, "run", lambda *a, **kw: calls.append(a))

        await session.init_db()

        assert calls == []
        assert session.is_db_available()
