import argparse
import logging
import sys

from src.adapters.clock import SystemClock
from src.adapters.fs.filestore import FileSystemStore
from src.adapters.fs.room_store import JsonRoomRepo
from src.api.deps import CleanupRulesAdapter, Settings, hasher_for
from src.app_shell.config import ConfigError, validate_ops_rules
from src.components.cleanup import CleanupInput, ListRoomAgesInput, run_cleanup, run_list
from src.rules.loader import load_rules
from src.rules.models import Rules

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("cli")


def get_rules(settings: Settings) -> Rules:
    if not settings.rules_path.exists():
        logger.error("Rules file %s not found.", settings.rules_path)
        sys.exit(1)
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules, settings.data_dir)
    except (ValueError, ConfigError) as e:
        logger.error("%s", e)
        sys.exit(1)
    return rules


def _stores(settings: Settings, rules: Rules) -> tuple[JsonRoomRepo, FileSystemStore, SystemClock]:
    clock = SystemClock()
    hasher = hasher_for(rules.password_hashing.algorithm)
    repo = JsonRoomRepo(settings.data_dir, hasher, clock)
    return repo, FileSystemStore(settings.uploads_dir(rules)), clock


def handle_serve(settings: Settings, args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )


def handle_cleanup(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    repo, uploads, clock = _stores(settings, rules)
    # Offline run: no hub, so no room counts as active
    out = run_cleanup(
        CleanupInput(dry_run=args.dry_run, max_age_days=args.max_age_days),
        repo=repo,
        uploads=uploads,
        time=clock,
        rules=CleanupRulesAdapter(rules),
    )

    for report in out.reports:
        if report.deleted:
            print(f"Deleted {report.room_name} ({report.age_days} days old)")
        elif report.stale:
            print(f"Would delete {report.room_name} ({report.age_days} days old)")
        elif report.reason:
            print(f"Skipped {report.room_name}: {report.reason}")

    verb = "would be deleted" if args.dry_run else "deleted"
    print(f"{len(out.stale) if args.dry_run else len(out.deleted)} room(s) {verb}.")


def handle_rooms(settings: Settings, rules: Rules) -> None:
    repo, uploads, clock = _stores(settings, rules)
    out = run_list(ListRoomAgesInput(), repo=repo, uploads=uploads, time=clock, rules=CleanupRulesAdapter(rules))

    if not out.reports:
        print("No rooms stored.")
        return
    for report in out.reports:
        age = "?" if report.age_days is None else f"{report.age_days}d"
        flag = " (stale)" if report.stale else ""
        note = f" [{report.reason}]" if report.reason else ""
        print(f" - {report.room_name}: {age}{flag}{note}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Infinite Canvas server CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP and websocket server")
    serve_parser.add_argument("--host", help="Bind address (default: CANVAS_HOST or 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, help="Port (default: CANVAS_PORT or 3001)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # cleanup
    cleanup_parser = subparsers.add_parser("cleanup", help="Delete rooms not modified recently")
    cleanup_parser.add_argument("--dry-run", action="store_true", help="Report without deleting")
    cleanup_parser.add_argument("--max-age-days", type=int, help="Override the configured age limit")

    # rooms
    subparsers.add_parser("rooms", help="List stored rooms with their age")

    args = parser.parse_args()
    settings = Settings()

    if args.command == "serve":
        handle_serve(settings, args)
        return

    rules = get_rules(settings)
    if args.command == "cleanup":
        handle_cleanup(settings, rules, args)
    elif args.command == "rooms":
        handle_rooms(settings, rules)


if __name__ == "__main__":
    main()
