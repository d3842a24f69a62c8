"""Command line entry point: serve the admin API or run a resync."""

import argparse
import sys

import structlog
import uvicorn

from searchsync.app import create_app
from searchsync.config import Settings
from searchsync.engine import SyncEngine
from searchsync.errors import SyncError
from searchsync.logging import configure_logging

logger = structlog.get_logger()


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="searchsync")
    commands = parser.add_subparsers(dest="command")

    commands.add_parser("serve", help="Run the admin/read HTTP API (default)")

    resync = commands.add_parser("resync", help="Rebuild documents from source tables")
    resync.add_argument(
        "--entity-type",
        dest="entity_types",
        action="append",
        help="Entity type to rebuild (repeatable; all types when omitted)",
    )
    resync.add_argument(
        "--prune",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Remove documents the sweep did not write",
    )

    refresh = commands.add_parser("refresh", help="Refresh one document")
    refresh.add_argument("entity_type")
    refresh.add_argument("entity_id", type=int)
    return parser


def run_resync(settings: Settings, entity_types: list[str] | None, prune: bool | None) -> int:
    """Run one resync sweep and return a process exit code."""
    engine = SyncEngine(settings)
    try:
        report = engine.synchronizer.resync_all(entity_types, prune=prune)
    except SyncError as e:
        logger.error("resync_failed", error=str(e), retryable=e.retryable)
        return 1
    finally:
        engine.close()
    print(report.model_dump_json(indent=2))
    return 0


def run_refresh(settings: Settings, entity_type: str, entity_id: int) -> int:
    """Refresh one document and return a process exit code."""
    engine = SyncEngine(settings)
    try:
        outcome = engine.synchronizer.refresh(entity_type, entity_id)
    except SyncError as e:
        logger.error("refresh_failed", error=str(e), retryable=e.retryable)
        return 1
    finally:
        engine.close()
    print(outcome.value)
    return 0


def serve(settings: Settings) -> int:
    """Run uvicorn until interrupted."""
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level="warning",
        access_log=False,
    )
    return 0


def main(argv: list[str] | None = None) -> None:
    """Entry point for python -m searchsync."""
    args = _parser().parse_args(argv)
    settings = Settings()
    one_shot = args.command in ("resync", "refresh")
    configure_logging(debug=settings.debug, stream=sys.stderr if one_shot else sys.stdout)

    if args.command == "resync":
        code = run_resync(settings, args.entity_types, args.prune)
    elif args.command == "refresh":
        code = run_refresh(settings, args.entity_type, args.entity_id)
    else:
        code = serve(settings)

    sys.exit(code)


if __name__ == "__main__":
    main()
