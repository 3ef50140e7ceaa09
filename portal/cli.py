"""
Client Portal CLI — entry point for operations.

Usage:
    portal serve            # Start the API server
    portal migrate status   # Show applied vs pending migrations
    portal migrate apply    # Apply pending migrations
    portal migrate --check  # Check tables and the append-only access log
    portal keygen           # Print a new PORTAL_ENCRYPTION_KEY value
    portal version          # Show version
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="portal",
        description="Client Portal — tenant records with encrypted credential custody.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument("--env-file", type=str, default=".env", help="Env file to load")

    subparsers = parser.add_subparsers(dest="command")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Port")

    # migrate
    migrate_parser = subparsers.add_parser("migrate", help="Run database migrations")
    migrate_parser.add_argument("action", nargs="?", choices=["status", "apply"], default="apply")
    migrate_parser.add_argument("migration_version", nargs="?", help="Apply only this version")
    migrate_parser.add_argument("--dry-run", action="store_true", help="List without executing")
    migrate_parser.add_argument(
        "--check", action="store_true", help="Check required tables and the append-only trigger"
    )

    # keygen
    subparsers.add_parser("keygen", help="Generate a base64 256-bit encryption key")

    # version
    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args(argv)

    env_path = Path(args.env_file)
    if env_path.exists():
        load_dotenv(env_path)

    if args.version or args.command == "version":
        from portal import __version__

        print(f"portal {__version__}")
        return 0

    if args.command == "serve":
        return _cmd_serve(args)
    elif args.command == "migrate":
        return _cmd_migrate(args)
    elif args.command == "keygen":
        return _cmd_keygen()
    else:
        parser.print_help()
        return 0


def _configure_logging() -> None:
    from portal.config import get_config

    logging.basicConfig(
        level=get_config().log_level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from portal.config import get_config

    _configure_logging()
    cfg = get_config()
    host = args.host or cfg.api_host
    port = args.port or cfg.api_port
    print(f"Starting Client Portal API on {host}:{port}...")
    uvicorn.run("portal.api.app:app", host=host, port=port, log_config=None)
    return 0


def _cmd_migrate(args: argparse.Namespace) -> int:
    from portal.db import migrate

    _configure_logging()
    try:
        if args.check:
            problems = migrate.schema_problems()
            if problems:
                print(f"Schema check failed ({len(problems)} problem(s)):")
                for p in problems:
                    print(f"  - {p}")
                print("\nRun 'portal migrate apply' to fix them.")
                return 1
            print(f"Schema OK: all {len(migrate.REQUIRED_TABLES)} tables, access log append-only.")
            return 0

        if args.action == "status":
            rows = migrate.status()
            if not rows:
                print("No migration files found.")
                return 0
            print(f"{'Version':<10} {'Filename':<45} {'Status':<10} {'Applied At'}")
            print("-" * 90)
            for r in rows:
                at = str(r["applied_at"])[:19] if r["applied_at"] else ""
                print(f"{r['version']:<10} {r['filename']:<45} {r['status']:<10} {at}")
            return 0

        applied = migrate.apply(version=args.migration_version, dry_run=args.dry_run)
        verb = "Would apply" if args.dry_run else "Applied"
        print(f"{verb} {len(applied)} migration(s).")
        return 0
    except ConnectionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _cmd_keygen() -> int:
    from portal.vault.crypto import generate_key

    print(generate_key())
    return 0


if __name__ == "__main__":
    sys.exit(main())
