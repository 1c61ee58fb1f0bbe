"""
Admin accounts: login and credential maintenance.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from agency.config import Settings
from agency.db import ADMINS, DocumentStore, Filter
from agency.errors import InternalError, InvalidCredentials
from agency.schemas import LoginRequest, LoginResponse
from agency.security import check_password, hash_password, issue_token
from agency.validation import validate

logger = logging.getLogger(__name__)


def login(store: DocumentStore, settings: Settings, payload: Mapping[str, Any]) -> LoginResponse:
    form = validate(LoginRequest, payload)
    admin = store.find_one(ADMINS, [Filter("username", form.username)])
    if admin is None:
        logger.info("Login attempt for unknown admin %s", form.username)
        raise InvalidCredentials()
    if not check_password(form.password, admin.get("passwordHash", "")):
        logger.info("Password mismatch for admin %s", form.username)
        raise InvalidCredentials()
    if not settings.jwt_secret:
        logger.error("JWT_SECRET is not configured; cannot issue tokens")
        raise InternalError()
    token = issue_token(admin["id"], settings.jwt_secret, settings.jwt_expires_seconds)
    logger.info("Token issued for admin %s", admin["id"])
    return LoginResponse(token=token)


def set_admin_password(store: DocumentStore, username: str, password: str) -> tuple[dict, bool]:
    """
    Create the admin ``username`` or reset its password.

    Returns the stored admin document and whether it was newly created.
    """
    password_hash = hash_password(password)
    existing = store.find_one(ADMINS, [Filter("username", username)])
    if existing is None:
        admin = store.insert(ADMINS, {"username": username, "passwordHash": password_hash})
        return admin, True
    admin = store.update(ADMINS, existing["id"], {"passwordHash": password_hash})
    return admin, False
