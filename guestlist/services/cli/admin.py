"""Administrative commands: bulk guest import and bootstrapping an admin."""
from __future__ import annotations

import argparse
import getpass
import json
import sys
from pathlib import Path
from typing import List, Optional

from guestlist.common.logging import configure_logging, get_logger
from guestlist.common.naming.people import is_valid_email, normalize_email
from guestlist.common.settings import Settings, get_settings
from guestlist.database.core.main import Database
from guestlist.domain.enums import AccountStatus
from guestlist.domain.errors import GuestlistError, NotFoundError
from guestlist.services.hashing.bcrypt_hasher import BcryptHasher
from guestlist.services.identity.store import IdentityStore
from guestlist.services.importer.guest_import import COLUMNS, GuestImporter

logger = get_logger(__name__)

# Exit codes: 0 ok, 1 some rows or the request failed, 2 usage/setup errors
EXIT_OK, EXIT_FAILED, EXIT_USAGE = 0, 1, 2


def _add_store_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy URL of the guest store (default: DATABASE_URL / DB__* settings)",
    )
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create missing tables first (development stores; use alembic elsewhere)",
    )


def _open_store(args: argparse.Namespace, cfg: Settings) -> Database:
    database = Database(args.database_url, settings=cfg)
    if args.create_schema:
        database.create_all()
    return database


# ---------------------------------------------------------------------------
# guestlist-import
# ---------------------------------------------------------------------------
def import_guests_main(argv: Optional[List[str]] = None, *, settings: Optional[Settings] = None) -> int:
    """Load a guest list CSV into the store.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])
        settings: Settings to use instead of the environment

    Returns:
        Exit code (0 for a clean import, 1 when rows failed, 2 for errors)
    """
    parser = argparse.ArgumentParser(
        prog="guestlist-import",
        description="Import guests and partner pairs from a CSV file",
        epilog="Columns: " + ",".join(COLUMNS),
    )
    parser.add_argument("csv", type=Path, help="Guest list CSV (header line optional)")
    parser.add_argument(
        "--format",
        "-f",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    _add_store_options(parser)
    args = parser.parse_args(argv)

    cfg = settings or get_settings()
    configure_logging(cfg.log_level)

    if not args.csv.is_file():
        print(f"Error: guest list not found: {args.csv}", file=sys.stderr)
        return EXIT_USAGE

    database = _open_store(args, cfg)
    try:
        with database.session() as db:
            identity = IdentityStore(db, hasher=BcryptHasher(rounds=cfg.auth.bcrypt_rounds))
            report = GuestImporter(db, identity=identity).import_file(args.csv)
    except GuestlistError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_USAGE
    finally:
        database.dispose()

    if args.format == "json":
        print(json.dumps(report.as_dict(), default=str, indent=2))
    else:
        print(
            f"{report.rows} rows: {report.created} created, {report.existing} existing, "
            f"{report.linked} linked, {report.invalid} invalid, {report.errors} errors"
        )
        for subject, message in report.error_details:
            print(f"  {subject}: {message}")

    return EXIT_FAILED if report.errors or report.invalid else EXIT_OK


# ---------------------------------------------------------------------------
# guestlist-create-admin
# ---------------------------------------------------------------------------
def create_admin_main(argv: Optional[List[str]] = None, *, settings: Optional[Settings] = None) -> int:
    """Create (or promote) a registered administrator.

    An active person already holding the email, or already on the list under
    the given name, is promoted instead of duplicated; an unregistered one is
    registered with the supplied password.

    Returns:
        Exit code (0 for success, 1 when the store refused, 2 for usage errors)
    """
    parser = argparse.ArgumentParser(
        prog="guestlist-create-admin",
        description="Create the first administrator, or promote an existing guest",
    )
    parser.add_argument("--email", required=True, help="Login email of the administrator")
    parser.add_argument("--first-name", default="Admin", help="First name (default: Admin)")
    parser.add_argument("--last-name", default="User", help="Last name (default: User)")
    parser.add_argument(
        "--password",
        help="Password for a new account (prompted for when omitted)",
    )
    _add_store_options(parser)
    args = parser.parse_args(argv)

    cfg = settings or get_settings()
    configure_logging(cfg.log_level)

    if not is_valid_email(normalize_email(args.email)):
        print(f"Error: malformed email address: {args.email}", file=sys.stderr)
        return EXIT_USAGE

    database = _open_store(args, cfg)
    try:
        with database.session() as db:
            identity = IdentityStore(db, hasher=BcryptHasher(rounds=cfg.auth.bcrypt_rounds))
            person = _find_admin_candidate(identity, args)
            if person is None:
                person = identity.create_person(args.first_name, args.last_name, is_admin=True)
                print(f"Created {person.display_name} ({person.id})")
            elif not person.is_admin:
                person = identity.grant_admin(person.id)
                print(f"Promoted {person.display_name} ({person.id}) to admin")
            else:
                print(f"{person.display_name} ({person.id}) is already an admin")

            if person.account_status is AccountStatus.unregistered:
                password = args.password or _prompt_password()
                if not password:
                    print("Error: a password is required to register the admin", file=sys.stderr)
                    return EXIT_USAGE
                person = identity.register(person.id, args.email, password)
                print(f"Registered {person.email}")
    except GuestlistError as exc:
        logger.warning("Admin bootstrap failed: %r", exc)
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_FAILED
    finally:
        database.dispose()

    return EXIT_OK


def _find_admin_candidate(identity: IdentityStore, args: argparse.Namespace):
    try:
        return identity.find_by_email(args.email)
    except NotFoundError:
        pass
    try:
        return identity.find_by_name(args.first_name, args.last_name)
    except NotFoundError:
        return None


def _prompt_password() -> str:
    first = getpass.getpass("Password: ")
    if first != getpass.getpass("Repeat password: "):
        print("Error: passwords do not match", file=sys.stderr)
        return ""
    return first
