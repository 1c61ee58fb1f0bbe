"""
Admin account maintenance: create the first admin or reset a password.
"""

from __future__ import annotations

import argparse
import getpass
import logging

from agency.accounts import set_admin_password
from agency.config import get_settings
from agency.db import ADMINS, Filter
from agency.dependencies import get_document_store

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Manage agency admin accounts")
    sub = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("create", "Create an admin account (resets the password if it exists)"),
        ("reset-password", "Reset the password of an existing admin"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("username")
        cmd.add_argument(
            "--password",
            default=None,
            help="New password (prompted for when omitted)",
        )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    settings = get_settings()
    if not settings.database_url and not settings.use_in_memory_backends:
        logger.error("DATABASE_URL is not set")
        return 1

    password = args.password or getpass.getpass("Password: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        logger.error("Password must be at least %d characters", MIN_PASSWORD_LENGTH)
        return 1

    store = get_document_store()
    existing = store.find_one(ADMINS, [Filter("username", args.username)])
    if args.command == "reset-password" and existing is None:
        logger.error("Admin %s not found", args.username)
        return 1

    admin, created = set_admin_password(store, args.username, password)
    if created:
        logger.info("Created admin %s (%s)", args.username, admin["id"])
    else:
        logger.info("Password reset for admin %s", args.username)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
