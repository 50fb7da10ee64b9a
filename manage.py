#!/usr/bin/env python3
"""
Central Kitchen management CLI.

Usage:
    python manage.py serve       Migrate the database and start the API
    python manage.py migrate     Apply pending schema migrations
    python manage.py status      Show applied and pending migrations
    python manage.py verify      Check schema and stock conservation
"""

import argparse
import asyncio
import socket
import subprocess
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent


def _is_port_free(host: str, port: int) -> bool:
    """Check if a port is available for binding."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind((host, port))
        return True
    except OSError:
        return False


def _db_path(args: argparse.Namespace) -> Path | None:
    return Path(args.db_path) if args.db_path else None


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations."""
    from src.infrastructure.storage.sqlite.migrations import initialize_database

    results = asyncio.run(
        initialize_database(_db_path(args), create_backup_before=not args.no_backup)
    )
    if not results:
        print("Schema is up to date.")
    for result in results:
        mark = "ok" if result.success else "FAIL"
        print(f"[{mark}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
        if result.error:
            print(f"       {result.error}")
    if not all(r.success for r in results):
        sys.exit(1)


def cmd_status(args: argparse.Namespace) -> None:
    """Print migration status."""
    from src.infrastructure.storage.sqlite.migrations import get_migration_status

    status = asyncio.run(get_migration_status(_db_path(args)))
    print(f"Database exists: {status['exists']}")
    print(f"Current version: {status['current_version'] or '-'}")
    print(f"Pending:         {', '.join(status['pending_migrations']) or 'none'}")


def cmd_verify(args: argparse.Namespace) -> None:
    """Run integrity checks; exit non-zero when any fails."""
    from src.infrastructure.storage.sqlite.migrations import verify_schema_integrity

    checks = asyncio.run(verify_schema_integrity(_db_path(args)))
    failed = False
    for check in checks:
        passed = check["status"] == "PASS"
        print(f"[{'ok' if passed else 'FAIL'}] {check['check']}")
        failed = failed or not passed
    if failed:
        sys.exit(1)


def cmd_serve(args: argparse.Namespace) -> None:
    """Start uvicorn in the foreground. Migrations run on application startup."""
    if not _is_port_free(args.host, args.port):
        print(f"Port {args.port} is already in use.")
        sys.exit(1)

    uvicorn_cmd = [
        sys.executable, "-m", "uvicorn",
        "src.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if args.reload:
        uvicorn_cmd.append("--reload")

    print(f"Starting server on {args.host}:{args.port}...")
    print(f"  API docs:  http://{args.host}:{args.port}/docs (debug only)")
    sys.exit(subprocess.call(uvicorn_cmd, cwd=str(ROOT_DIR)))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Central Kitchen management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default="127.0.0.1", help="Bind host (default: 127.0.0.1)")
    p_serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending migrations")
    p_migrate.add_argument("--db-path", help="Database file (default from settings)")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip the pre-migration backup")
    p_migrate.set_defaults(func=cmd_migrate)

    # status
    p_status = sub.add_parser("status", help="Show migration status")
    p_status.add_argument("--db-path", help="Database file (default from settings)")
    p_status.set_defaults(func=cmd_status)

    # verify
    p_verify = sub.add_parser("verify", help="Verify schema integrity")
    p_verify.add_argument("--db-path", help="Database file (default from settings)")
    p_verify.set_defaults(func=cmd_verify)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
