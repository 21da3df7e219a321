# Rev 0.2.0

"""Pytest fixtures for teamflow (Rev 0.2.0)"""
from __future__ import annotations
import logging
import sys
from pathlib import Path

import pytest
from passlib.context import CryptContext

from teamflow.app_context import AppContext
from teamflow.repositories.db import Database
from teamflow.services import user_service
from teamflow.utils import logging_setup


def password_for(username: str) -> str:
    return f"pw-{username}"


def sign_in_as(ctx: AppContext, username: str) -> None:
    ctx.users.sign_out()
    ctx.users.sign_in(username, password_for(username))


@pytest.fixture(autouse=True)
def _fast_hashing(monkeypatch):
    # minimum bcrypt cost keeps sign-up cheap in tests
    monkeypatch.setattr(user_service, "pwd_context", CryptContext(schemes=["bcrypt"], bcrypt__rounds=4))


@pytest.fixture(autouse=True)
def _isolated_logging(tmp_path: Path, monkeypatch):
    """Keep log files under tmp_path and drop any handlers a test installed."""
    monkeypatch.setattr(logging_setup, "LOGS_DIR", tmp_path / "logs")
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    root = logging.getLogger()
    level, before = root.level, list(root.handlers)
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
            handler.close()
    logging_setup._installed.clear()
    root.setLevel(level)


@pytest.fixture()
def db(tmp_path: Path):
    database = Database(path=tmp_path / "test.db")
    try:
        database.run_migrations()
        yield database
    finally:
        database.close()


@pytest.fixture()
def ctx(tmp_path: Path):
    context = AppContext.create(tmp_path / "app.db")
    try:
        yield context
    finally:
        context.close()


@pytest.fixture()
def team(ctx: AppContext):
    """alice manages team Core with bob and carol; dave is registered but outside. Signed in as alice."""
    for name in ("alice", "bob", "carol", "dave"):
        ctx.users.sign_up(name, password_for(name))
    sign_in_as(ctx, "alice")
    core = ctx.teams.create_team("Core")
    ctx.teams.add_member(core.id, "bob")
    ctx.teams.add_member(core.id, "carol")
    return core
