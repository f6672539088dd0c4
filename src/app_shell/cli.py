import argparse
import dataclasses
import logging
import sys
from datetime import timedelta

import uvicorn

from src.adapters.clock import SystemClock
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteCatalogRepo, SQLiteEventRepo
from src.api.deps import Settings, get_settings
from src.api.schemas import OverviewResponse
from src.app_shell.config import configure_logging
from src.components.analytics import AggregateConfig, OverviewInput, run_overview
from src.components.tracking import TrackingQueryService
from src.domain.entities import Ad, EventType, Project, Survey, TrackingEvent
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger("cli")

DEMO_PROJECT_ID = "demo-project"


def get_rules(settings: Settings) -> Rules:
    if not settings.rules_path.exists():
        logger.error("Rules file %s not found.", settings.rules_path)
        sys.exit(1)
    return load_rules(settings.rules_path)


def handle_migrate(settings: Settings, dry_run: bool = False) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    migrator = SQLiteMigrator(settings.db_path, str(settings.migrations_dir))
    if dry_run:
        pending = migrator.pending()
        if pending:
            print(f"Pending {len(pending)} migration(s): {', '.join(pending)}")
        else:
            print("Database is up to date.")
        return

    applied = migrator.run_migrations()
    if applied:
        print(f"Applied {len(applied)} migration(s): {', '.join(applied)}")
    else:
        print("Database is up to date.")


def handle_seed(settings: Settings) -> None:
    """Create a demo project with two ads, one survey and a week of events."""
    handle_migrate(settings)
    catalog = SQLiteCatalogRepo(settings.db_path)
    events = SQLiteEventRepo(settings.db_path)

    project = catalog.save_project(
        Project(id=DEMO_PROJECT_ID, name="Demo Project", description="Seeded demo data")
    )
    spring = catalog.save_ad(
        Ad(project_id=project.id, title="Spring Sale Banner", brand_name="Acme")
    )
    launch = catalog.save_ad(
        Ad(project_id=project.id, title="New Product Launch Video Spot", brand_name="Acme")
    )
    survey = catalog.save_survey(Survey(project_id=project.id, title="Customer Satisfaction"))

    now = SystemClock().now_utc()
    count = 0
    for day in range(7):
        at = now - timedelta(days=day, hours=1)
        session = f"seed-session-{day}"
        samples = [
            (EventType.AD_IMPRESSION, spring.id, None),
            (EventType.AD_IMPRESSION, launch.id, None),
            (EventType.AD_CLICK, spring.id, None),
            (EventType.SURVEY_IMPRESSION, None, survey.id),
            (EventType.SURVEY_START, None, survey.id),
        ]
        if day % 2 == 0:
            samples.append((EventType.SURVEY_SUBMIT, None, survey.id))
        for i, (event_type, ad_id, survey_id) in enumerate(samples):
            events.save(
                TrackingEvent(
                    event_type=event_type.value,
                    event_id=f"seed-{day}-{i}",
                    project_id=project.id,
                    ad_id=ad_id,
                    survey_id=survey_id,
                    session_id=session,
                    timestamp=at + timedelta(minutes=i),
                )
            )
            count += 1

    print(f"Seeded project '{project.id}' with 2 ads, 1 survey and {count} events.")


def handle_report(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    analytics = rules.analytics
    config = AggregateConfig(
        top_n=analytics.top_n,
        timeline_days=analytics.timeline_days,
        heatmap_days=analytics.heatmap_days,
        recent_activity_limit=analytics.recent_activity_limit,
        title_max_chars=analytics.title_max_chars,
    )
    output = run_overview(
        OverviewInput(project_id=args.project_id),
        events=TrackingQueryService(SQLiteEventRepo(settings.db_path)),
        catalog=SQLiteCatalogRepo(settings.db_path),
        time_port=SystemClock(),
        config=config,
    )
    if output.summary is None:
        reason = output.errors[0].message if output.errors else "storage failure"
        logger.error("Report failed: %s", reason)
        sys.exit(1)

    response = OverviewResponse.model_validate(
        {**dataclasses.asdict(output.summary), "project_id": args.project_id}
    )
    print(response.model_dump_json(by_alias=True, indent=2))


def handle_serve(args: argparse.Namespace) -> None:
    """Run the API under uvicorn. Rules and stores load at startup."""
    uvicorn.run("src.api.main:app", host=args.host, port=args.port, reload=args.reload)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="AdPulse CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    migrate_parser = subparsers.add_parser("migrate", help="Apply pending database migrations")
    migrate_parser.add_argument(
        "--dry-run", action="store_true", help="List pending migrations without applying them"
    )

    # seed
    subparsers.add_parser("seed", help="Create a demo project with sample events")

    # report
    report_parser = subparsers.add_parser("report", help="Print a project overview as JSON")
    report_parser.add_argument("project_id", help="Project to report on")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true", help="Restart on code changes")

    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)
    rules = get_rules(settings)

    if args.command == "migrate":
        handle_migrate(settings, dry_run=args.dry_run)
    elif args.command == "seed":
        handle_seed(settings)
    elif args.command == "report":
        # Migrate quietly so stdout stays pure JSON.
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
        handle_report(settings, rules, args)
    elif args.command == "serve":
        handle_serve(args)


if __name__ == "__main__":
    main()
