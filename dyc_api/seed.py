"""
Out-of-band provisioning: indexes, politicians and admin accounts.

    python -m dyc_api.seed --indexes
    python -m dyc_api.seed --politicians politicians.json
    python -m dyc_api.seed --admin ana --password s3cret --permission view_audit_logs
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError
from pymongo.database import Database

from dyc_api import config
from dyc_api.crud import insert_politicians, upsert_admin
from dyc_api.database.connection import close_client, ensure_indexes, get_db
from dyc_api.models.admin_model import Permission

logger = logging.getLogger("dyc_api.seed")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m dyc_api.seed", description="Provision the DYC database")
    parser.add_argument("--indexes", action="store_true", help="create all collection indexes")
    parser.add_argument("--politicians", metavar="FILE", help="JSON list of politicians to insert")
    parser.add_argument("--admin", metavar="USERNAME", help="create or reset an admin account")
    parser.add_argument("--password", help="password for --admin")
    parser.add_argument("--email", help="email for a new --admin (default <username>@dyc.com)")
    parser.add_argument(
        "--permission",
        action="append",
        choices=[p.value for p in Permission],
        help="permission for --admin, repeatable (default system_admin)",
    )
    return parser


def run(args: argparse.Namespace, db: Database) -> int:
    if args.indexes:
        ensure_indexes(db)

    if args.politicians:
        with open(args.politicians, encoding="utf-8") as f:
            records = json.load(f)
        if not isinstance(records, list):
            logger.error(f"{args.politicians} must contain a JSON list")
            return 1
        try:
            inserted, skipped = insert_politicians(db, records)
        except ValidationError as e:
            logger.error(f"Invalid politician record: {e}")
            return 1
        logger.info(f"Politicians inserted: {inserted}, skipped: {skipped}")

    if args.admin:
        if not args.password:
            logger.error("--admin requires --password")
            return 2
        admin = upsert_admin(db, args.admin, args.password, email=args.email, permissions=args.permission)
        logger.info(f"Admin {admin['username']} ready with permissions {admin['permissions']}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)
    if not (args.indexes or args.politicians or args.admin):
        parser.print_help()
        return 2
    try:
        return run(args, get_db())
    finally:
        close_client()


if __name__ == "__main__":
    sys.exit(main())
