import argparse
import json
from pathlib import Path

from .env import load_env

from . import __version__
from .config import Settings
from .database import get_session, init_database, recent_lookups
from .errors import BlockedByChallenge, QuotaExceeded
from .identity import Identity, enhance_identity
from .providers import get_provider
from .quota import DailyQuota
from .resolver import build_resolver
from .search import build_query_urls


def _settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if getattr(args, "providers", None):
        settings.providers = [p.strip().lower() for p in args.providers.split(",") if p.strip()]
    if getattr(args, "host", None):
        settings.host = args.host
    if getattr(args, "port", None):
        settings.port = args.port
    if getattr(args, "db", None) is not None:
        settings.history_db = args.db
    errors = settings.validate()
    if errors:
        raise SystemExit("Invalid configuration:\n" + "\n".join(f" - {e}" for e in errors))
    return settings


def cmd_resolve(args: argparse.Namespace) -> None:
    settings = _settings(args)
    resolver = build_resolver(settings)
    identity = Identity.create(args.name, args.company, args.email)
    if not identity.display_name:
        raise SystemExit("Provide a non-empty --name")

    try:
        result = resolver.resolve(identity)
    except (QuotaExceeded, BlockedByChallenge) as e:
        raise SystemExit(str(e))
    finally:
        resolver.logger.log_metrics_summary()

    if args.json:
        data = result.to_dict()
        data["attempts"] = [a.to_dict() for a in result.attempts_log]
        print(json.dumps(data, indent=2))
        return

    print(f"Name: {result.identity.display_name}")
    if result.found:
        print(f"Profile: {result.canonical_url}")
        print(f"Match: {result.verdict.reason} (score {result.verdict.match_score}, {result.winner.provenance.value})")
    else:
        print(f"No verified profile found ({result.reason})")
    for attempt in result.attempts_log:
        print(f" - [{attempt.outcome}] {attempt.step}: {attempt.query} "
              f"(candidates={attempt.candidate_count} accepted={attempt.accepted_count})")


def cmd_query(args: argparse.Namespace) -> None:
    settings = _settings(args)
    identity = enhance_identity(Identity.create(args.name, args.company, args.email))
    providers = [get_provider(name) for name in settings.providers]
    print("Search URLs:")
    for u in build_query_urls(identity, providers):
        print(f" - {u}")


def cmd_serve(args: argparse.Namespace) -> None:
    from .server import create_app

    settings = _settings(args)
    quota = DailyQuota(settings.max_daily)
    resolver = build_resolver(settings, quota=quota)
    history = Path(settings.history_db) if settings.history_db else None
    app = create_app(resolver, quota, history_path=history, enable_cors=settings.cors)
    print(f"LinkedIn URL Finder listening on http://{settings.host}:{settings.port} "
          f"(providers: {', '.join(settings.providers)}, daily limit: {settings.max_daily})")
    app.run(host=settings.host, port=settings.port, threaded=True)


def cmd_history(args: argparse.Namespace) -> None:
    settings = _settings(args)
    if not settings.history_db:
        raise SystemExit("Lookup history is disabled (PROFILEFINDER_DB is empty)")
    db_path = Path(settings.history_db)
    if not db_path.exists():
        print(f"History not found: {db_path}")
        return
    init_database(db_path)
    session = get_session(db_path)
    try:
        records = recent_lookups(session, limit=args.limit)
        if not records:
            print("No lookups recorded.")
            return
        for r in records:
            status = "found" if r.success else (r.reason or "miss")
            print(f"{r.created_at:%Y-%m-%d %H:%M:%S} [{status}] {r.name} ({r.company or 'N/A'}) "
                  f"{r.profile_url or ''}".rstrip())
    finally:
        session.close()


def main():
    # Load .env if present (PROFILEFINDER_* settings)
    load_env()
    parser = argparse.ArgumentParser(prog="profilefinder", description="Find public LinkedIn profile URLs via web search")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    res = subparsers.add_parser("resolve", help="Resolve a person to a LinkedIn profile URL")
    res.add_argument("--name", required=True, help="Person's name, e.g. \"Sam Schalkwijk\"")
    res.add_argument("--company", help="Employer used to narrow the search")
    res.add_argument("--email", help="Email used to complete a bare first name")
    res.add_argument("--providers", help="Comma-separated providers in fallback order (default: bing)")
    res.add_argument("--json", action="store_true", help="Print the result as JSON")
    res.set_defaults(func=cmd_resolve)

    qry = subparsers.add_parser("query", help="Print the search URLs a lookup would use")
    qry.add_argument("--name", required=True, help="Person's name")
    qry.add_argument("--company", help="Employer")
    qry.add_argument("--email", help="Email used to complete a bare first name")
    qry.add_argument("--providers", help="Comma-separated providers (default: bing)")
    qry.set_defaults(func=cmd_query)

    srv = subparsers.add_parser("serve", help="Run the HTTP API (POST /scrape, GET /health, GET /test)")
    srv.add_argument("--host", help="Bind address (default: PROFILEFINDER_HOST or 0.0.0.0)")
    srv.add_argument("--port", type=int, help="Port (default: PROFILEFINDER_PORT or 3000)")
    srv.add_argument("--providers", help="Comma-separated providers (default: bing)")
    srv.add_argument("--db", help="Lookup history database (empty string disables)")
    srv.set_defaults(func=cmd_serve)

    hst = subparsers.add_parser("history", help="List recent lookups")
    hst.add_argument("--limit", type=int, default=20, help="Number of lookups to show (default: 20)")
    hst.add_argument("--db", help="Lookup history database (default: data/lookups.db)")
    hst.set_defaults(func=cmd_history)

    args = parser.parse_args()

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
