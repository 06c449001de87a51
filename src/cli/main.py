"""
CLI main entry point for Page Monitor.

Thin wrapper around the monitor engine - no business logic here.
"""

import argparse
import os
import sys
from pathlib import Path

from monitor import ConfigurationError, MailgunSettings, MonitorConfig, MonitorRunner
from monitor.config import DEFAULT_SUBJECT, read_lines
from monitor.differ import DIFFERS
from monitor.log import setup_logging
from monitor.notifier import MailgunNotifier

from .output import print_outcome, print_run_summary

EXIT_CONFIG_ERROR = 2


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Check web pages for content changes and mail a report when they change.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --domain mg.example.com --private-key key-... --public-key pubkey-...
  %(prog)s --dry --base-dir ./monitor
  %(prog)s --dry --fail-fast --concurrency 1
        """,
    )

    parser.add_argument(
        "--domain",
        type=str,
        default=os.environ.get("MAILGUN_DOMAIN"),
        help="Mailgun domain (default: $MAILGUN_DOMAIN)",
    )

    parser.add_argument(
        "--private-key",
        type=str,
        default=os.environ.get("MAILGUN_PRIVATE_KEY"),
        help="Secret Mailgun API key (default: $MAILGUN_PRIVATE_KEY)",
    )

    parser.add_argument(
        "--public-key",
        type=str,
        default=os.environ.get("MAILGUN_PUBLIC_KEY"),
        help="Mailgun public API key (default: $MAILGUN_PUBLIC_KEY)",
    )

    parser.add_argument(
        "--dry",
        action="store_true",
        help="Do not update the cache and only print to stdout (no e-mail)",
    )

    parser.add_argument(
        "--base-dir",
        type=str,
        default=".",
        help="Directory holding urls.txt, emails.txt and cache/ (default: current directory)",
    )

    parser.add_argument(
        "--urls-file",
        type=str,
        default=None,
        help="File with one URL per line (default: <base-dir>/urls.txt)",
    )

    parser.add_argument(
        "--emails-file",
        type=str,
        default=None,
        help="File with one recipient address per line (default: <base-dir>/emails.txt)",
    )

    parser.add_argument(
        "--sender",
        type=str,
        default=None,
        help="From address for reports (default: postmaster@<domain>)",
    )

    parser.add_argument(
        "--subject",
        type=str,
        default=DEFAULT_SUBJECT,
        help=f"Subject line for reports (default: {DEFAULT_SUBJECT!r})",
    )

    parser.add_argument(
        "-c",
        "--concurrency",
        type=int,
        default=3,
        help="Maximum number of URLs to check concurrently (default: 3)",
    )

    parser.add_argument(
        "-t",
        "--timeout",
        type=int,
        default=30,
        help="Timeout in seconds for each fetch (default: 30)",
    )

    parser.add_argument(
        "--mail-timeout",
        type=float,
        default=30.0,
        help="Timeout in seconds for each Mailgun request (default: 30)",
    )

    parser.add_argument(
        "--user-agent",
        type=str,
        default=None,
        help="Custom User-Agent header (optional)",
    )

    parser.add_argument(
        "--diff-algorithm",
        type=str,
        choices=sorted(DIFFERS),
        default="lcs",
        help="Line diff algorithm (default: lcs)",
    )

    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Check URLs one at a time and stop at the first failure",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Log level for stderr diagnostics (default: WARNING)",
    )

    parser.add_argument(
        "--log-format",
        type=str,
        choices=["console", "json"],
        default="console",
        help="Log output format (default: console)",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """
    Main CLI entry point.

    Orchestrates the entire CLI workflow:
    1. Parse arguments and validate credentials
    2. Read URLs and recipients
    3. Run the monitor
    4. Print one line per URL and a summary
    """
    args = parse_arguments(argv)
    setup_logging(args.log_level, args.log_format)

    try:
        settings = MailgunSettings(
            domain=args.domain,
            private_key=args.private_key,
            public_key=args.public_key,
            sender=args.sender,
            timeout=args.mail_timeout,
        )
        settings.validate()

        config = MonitorConfig(
            base_dir=Path(args.base_dir),
            urls_file=Path(args.urls_file) if args.urls_file else None,
            recipients_file=Path(args.emails_file) if args.emails_file else None,
            dry_run=args.dry,
            fail_fast=args.fail_fast,
            max_concurrency=args.concurrency,
            fetch_timeout=args.timeout * 1000,  # Convert to milliseconds
            user_agent=args.user_agent,
            diff_algorithm=args.diff_algorithm,
            subject=args.subject,
        )

        urls = read_lines(config.urls_file)
        recipients = read_lines(config.recipients_file)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    notifier = None if config.dry_run else MailgunNotifier(settings, recipients)
    runner = MonitorRunner(config, notifier=notifier)

    result = runner.run(urls)

    for outcome in result.outcomes:
        print_outcome(outcome, dry_run=config.dry_run)
    print_run_summary(result)

    # Exit with error code if any URLs failed
    if result.urls_failed > 0 or result.aborted:
        sys.exit(1)


if __name__ == "__main__":
    main()
