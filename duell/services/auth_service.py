# duell/services/auth_service.py

from typing import Optional

from sqlalchemy.orm import Session

from duell.core import crud, security
from duell.core.constants import ADMIN_USERNAME, ADMIN_PASSWORD, ADMIN_PASSWORD_LENGTH
from duell.core.logger import logger, security_logger
from duell.core.rate_limit import LoginGuard, login_guard
from duell.core.utils import login_identifier


class LoginRejected(Exception):
    """Login refused. ``locked`` distinguishes a lockout (429) from bad credentials (401)."""

    def __init__(self, message: str, retry_after: Optional[int], locked: bool):
        super().__init__(message)
        self.message = message
        self.retry_after = retry_after
        self.locked = locked


def login(db: Session, username: str, password: str, client_ip: str,
          guard: LoginGuard = login_guard) -> dict:
    identifier = login_identifier(client_ip, username)

    check = guard.check_attempt(identifier)
    if not check.allowed:
        security_logger.warning(f"Login gesperrt | identifier={identifier} retry_after={check.retry_after}s")
        raise LoginRejected(check.message, check.retry_after, locked=True)

    admin = crud.get_admin_by_username(db, username)
    # unknown user and wrong password are treated the same way
    if admin is None or not security.verify_password(password, admin.hashed_password):
        lockout = guard.record_failed_attempt(identifier)
        raise LoginRejected(f"Ungültige Anmeldedaten. {lockout.message}", lockout.retry_after, locked=False)

    guard.clear_attempts(identifier)
    token = security.create_access_token({"sub": admin.id, "username": admin.username})
    security_logger.info(f"Admin angemeldet | username={admin.username} ip={client_ip}")
    return {"access_token": token, "token_type": "bearer", "username": admin.username}


def _log_credentials_banner(username: str, password: str):
    separator = "=" * 70
    inner = "-" * 70
    for line in (
        separator,
        "   ADMIN CREDENTIALS - GENERATED ON STARTUP",
        inner,
        f"   Username:  {username}",
        f"   Password:  {password}",
        inner,
        "   WICHTIG: Diese Zugangsdaten werden bei jedem Neustart neu generiert!",
        separator,
    ):
        logger.warning(line)


def seed_admin(db: Session, username: str = ADMIN_USERNAME, password: Optional[str] = ADMIN_PASSWORD) -> str:
    """Create the admin account or reset its password; returns the password in effect."""
    generated = password is None
    if generated:
        password = security.generate_password(ADMIN_PASSWORD_LENGTH)
    _, created = crud.upsert_admin(db, username, password)
    logger.info(f"Admin-Benutzer {'angelegt' if created else 'Passwort aktualisiert'} | username={username}")
    if generated:
        _log_credentials_banner(username, password)
    return password
