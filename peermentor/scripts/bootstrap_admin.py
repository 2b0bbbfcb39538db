"""
One-time creation of the first admin account.

    ENABLE_ADMIN_BOOTSTRAP=true ADMIN_BOOTSTRAP_CONFIRM=CREATE-FIRST-ADMIN \
    ADMIN_FIRST_NAME=Ada ADMIN_LAST_NAME=Admin \
    ADMIN_EMAIL=admin@example.edu ADMIN_PASSWORD=... \
    python -m peermentor.scripts.bootstrap_admin
"""

import logging
import os
import re
import sys
from typing import Optional

from peermentor import models
from peermentor.database import Base, SessionLocal, engine
from peermentor.models.user import ROLE_ADMIN
from peermentor.utils.security import get_password_hash

logger = logging.getLogger(__name__)

CONFIRM_PHRASE = "CREATE-FIRST-ADMIN"
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _is_truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "y", "on"}


def _required_env(key: str) -> str:
    value = os.getenv(key, "").strip()
    if not value:
        raise ValueError(f"Missing required environment variable: {key}")
    return value


def _validate_password(password: str) -> None:
    if len(password) < 8:
        raise ValueError("ADMIN_PASSWORD must be at least 8 characters.")
    if len(password.encode("utf-8")) > 72:
        raise ValueError("ADMIN_PASSWORD must be <= 72 bytes (bcrypt limit).")
    if not re.search(r"[A-Za-z]", password) or not re.search(r"\d", password):
        raise ValueError("ADMIN_PASSWORD must mix letters and digits.")


def bootstrap_admin(session_factory=SessionLocal) -> int:
    try:
        if not _is_truthy(os.getenv("ENABLE_ADMIN_BOOTSTRAP")):
            raise ValueError("Bootstrap disabled. Set ENABLE_ADMIN_BOOTSTRAP=true to run.")
        if _required_env("ADMIN_BOOTSTRAP_CONFIRM") != CONFIRM_PHRASE:
            raise ValueError(
                f"Invalid ADMIN_BOOTSTRAP_CONFIRM. Expected exact phrase: {CONFIRM_PHRASE}"
            )

        first_name = _required_env("ADMIN_FIRST_NAME")
        last_name = os.getenv("ADMIN_LAST_NAME", "").strip()
        email = _required_env("ADMIN_EMAIL").lower()
        password = _required_env("ADMIN_PASSWORD")

        if not EMAIL_RE.match(email):
            raise ValueError("ADMIN_EMAIL is not a valid email format.")
        _validate_password(password)

        db = session_factory()
        try:
            if db.query(models.User).filter(models.User.role == ROLE_ADMIN).count() > 0:
                raise ValueError(
                    "Admin bootstrap blocked: an admin already exists. "
                    "This command is one-time for first admin creation."
                )
            if db.query(models.User).filter(models.User.email == email).first():
                raise ValueError("ADMIN_EMAIL is already registered.")

            db.add(models.User(
                first_name=first_name,
                last_name=last_name,
                email=email,
                password_hash=get_password_hash(password),
                role=ROLE_ADMIN,
                approved=True,
                is_active=True,
            ))
            db.commit()
            logger.info("Admin created successfully: %s", email)
            return 0
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
    except Exception as exc:
        logger.error("Admin bootstrap failed: %s", exc)
        return 1


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s", stream=sys.stderr)
    Base.metadata.create_all(bind=engine)
    raise SystemExit(bootstrap_admin())
