from __future__ import annotations

import pytest

from peermentor import models
from peermentor.models.user import ROLE_ADMIN
from peermentor.scripts.bootstrap_admin import bootstrap_admin


@pytest.fixture
def admin_env(monkeypatch):
    monkeypatch.setenv("ENABLE_ADMIN_BOOTSTRAP", "true")
    monkeypatch.setenv("ADMIN_BOOTSTRAP_CONFIRM", "CREATE-FIRST-ADMIN")
    monkeypatch.setenv("ADMIN_FIRST_NAME", "Ada")
    monkeypatch.setenv("ADMIN_LAST_NAME", "Admin")
    monkeypatch.setenv("ADMIN_EMAIL", "Admin@Test.edu")
    monkeypatch.setenv("ADMIN_PASSWORD", "adminpass1")
    return monkeypatch


def test_bootstrap_creates_first_admin_once(admin_env, session_factory):
    assert bootstrap_admin(session_factory) == 0
    assert bootstrap_admin(session_factory) == 1

    db = session_factory()
    try:
        admins = db.query(models.User).filter(models.User.role == ROLE_ADMIN).all()
        assert [a.email for a in admins] == ["admin@test.edu"]
        assert admins[0].approved is True
    finally:
        db.close()


def test_bootstrap_disabled_by_default(admin_env, session_factory):
    admin_env.delenv("ENABLE_ADMIN_BOOTSTRAP")
    assert bootstrap_admin(session_factory) == 1


def test_bootstrap_requires_confirm_phrase(admin_env, session_factory):
    admin_env.setenv("ADMIN_BOOTSTRAP_CONFIRM", "yes")
    assert bootstrap_admin(session_factory) == 1


def test_bootstrap_rejects_weak_password(admin_env, session_factory):
    admin_env.setenv("ADMIN_PASSWORD", "onlyletters")
    assert bootstrap_admin(session_factory) == 1
