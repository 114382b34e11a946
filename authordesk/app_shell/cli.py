import argparse
import getpass
import logging
import sys
from pathlib import Path

from authordesk.app_shell.config import Settings, configure_logging, get_settings
from authordesk.app_shell.context import ServiceContext
from authordesk.components import activity, blog, books, engagements, messages
from authordesk.components.auth import CreateAdminInput, run_create_admin
from authordesk.rules.loader import load_rules

logger = logging.getLogger("cli")


def get_context(settings: Settings) -> ServiceContext:
    try:
        rules = load_rules(settings.rules_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Could not load rules: %s", e)
        sys.exit(1)

    Path(settings.data_dir).mkdir(parents=True, exist_ok=True)
    return ServiceContext.create(
        settings.db_path,
        settings.storage_dir,
        rules,
        secret_key=settings.secret_key,
        public_base_url=settings.public_base_url,
    )


def handle_migrate(ctx: ServiceContext, settings: Settings, args: argparse.Namespace) -> None:
    applied = ctx.migrate(str(settings.migrations_dir))
    if applied:
        for name in applied:
            print(f"Applied {name}")
    else:
        print("Database is up to date.")


def handle_create_admin(ctx: ServiceContext, args: argparse.Namespace) -> None:
    password = args.password or getpass.getpass("Password: ")
    result = run_create_admin(
        CreateAdminInput(email=args.email, password=password, display_name=args.display_name),
        ctx.admin_repo,
        ctx.auth_adapter,
        ctx.clock,
        ctx.configs.auth,
    )
    if not result.success or result.user is None:
        logger.error("Could not create admin: %s", result.error)
        sys.exit(1)
    ctx.activity.log_system("admin_created", {"email": result.user.email})
    print(f"Admin {result.user.email} created.")


def handle_export(ctx: ServiceContext, args: argparse.Namespace) -> None:
    result = messages.run_export(
        messages.ExportMessagesInput(
            format=args.format,
            status=args.status,
            purpose=args.purpose,
            include_attachments=args.include_attachments,
        ),
        repo=ctx.message_repo,
        time=ctx.clock,
    )
    if not result.success:
        logger.error("Export failed: %s", "; ".join(e.message for e in result.errors))
        sys.exit(1)

    target = Path(args.output) if args.output else Path(result.filename)
    target.write_text(result.content, encoding="utf-8")
    ctx.activity.log_system("messages_export", {"format": args.format, "count": result.count})
    print(f"Exported {result.count} message(s) to {target}")


def handle_purge_logs(ctx: ServiceContext, args: argparse.Namespace) -> None:
    result = activity.run_purge(
        activity.PurgeLogsInput(older_than_days=args.older_than_days),
        repo=ctx.log_repo,
        time=ctx.clock,
        config=ctx.configs.activity,
    )
    if not result.success:
        logger.error("Purge failed: %s", "; ".join(e.message for e in result.errors))
        sys.exit(1)
    print(f"Deleted {result.deleted} log entries older than {result.cutoff}.")


def handle_stats(ctx: ServiceContext, args: argparse.Namespace) -> None:
    book_stats = books.run_stats(repo=ctx.book_repo)
    blog_stats = blog.run_stats(repo=ctx.post_repo, tag_repo=ctx.tag_repo)
    engagement_stats = engagements.run_stats(repo=ctx.engagement_repo)
    message_stats = messages.run_stats(repo=ctx.message_repo)
    log_stats = activity.run_stats(repo=ctx.log_repo)

    print(f"Books:       {book_stats.total_books} ({book_stats.featured_books} featured)")
    print(
        f"Blog posts:  {blog_stats.total} "
        f"({blog_stats.published} published, {blog_stats.draft} drafts, {blog_stats.tags} tags)"
    )
    print(
        f"Engagements: {engagement_stats.total} "
        f"({engagement_stats.upcoming} upcoming, {engagement_stats.featured} featured)"
    )
    print(
        f"Messages:    {message_stats.total} "
        f"({message_stats.unread} unread, {message_stats.replied} replied)"
    )
    print(f"Log entries: {log_stats.total}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Authordesk admin CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # create-admin
    admin_parser = subparsers.add_parser("create-admin", help="Create an admin account")
    admin_parser.add_argument("--email", required=True, help="Admin email (must be allow-listed)")
    admin_parser.add_argument("--password", help="Password (prompted when omitted)")
    admin_parser.add_argument("--display-name", help="Name shown in the console")

    # export-messages
    export_parser = subparsers.add_parser("export-messages", help="Export contact messages")
    export_parser.add_argument("--format", choices=["csv", "json"], default="csv")
    export_parser.add_argument("--status", help="Only messages with this status")
    export_parser.add_argument("--purpose", help="Only messages with this purpose")
    export_parser.add_argument(
        "--include-attachments", action="store_true", help="Include attachment names"
    )
    export_parser.add_argument("--output", help="Output file (defaults to a timestamped name)")

    # purge-logs
    purge_parser = subparsers.add_parser("purge-logs", help="Delete old activity log entries")
    purge_parser.add_argument("--older-than-days", type=int, help="Retention in days")

    # stats
    subparsers.add_parser("stats", help="Show content and inbox counts")

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    settings = get_settings()
    ctx = get_context(settings)

    if args.command == "migrate":
        handle_migrate(ctx, settings, args)
        return

    ctx.migrate(str(settings.migrations_dir))
    if args.command == "create-admin":
        handle_create_admin(ctx, args)
    elif args.command == "export-messages":
        handle_export(ctx, args)
    elif args.command == "purge-logs":
        handle_purge_logs(ctx, args)
    elif args.command == "stats":
        handle_stats(ctx, args)


if __name__ == "__main__":
    main()
