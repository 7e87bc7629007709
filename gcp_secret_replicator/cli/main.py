"""CLI entrypoint for gcp-secret-replicator."""
import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

from gcp_secret_replicator.replication.domains.config_loader import (
    ConfigError,
    apply_credentials,
    copy_all_versions_enabled,
    load_config,
)
from gcp_secret_replicator.replication.domains.exceptions import PreconditionError
from gcp_secret_replicator.replication.domains.gcp_client import GCPSecretClient
from gcp_secret_replicator.replication.domains.models import ReplicationMode, RunSummary
from gcp_secret_replicator.replication.workflows.replicate_secrets import SecretReplicator

from .console import BOLD, GREEN, RED, colorize, configure_logging
from .validators import EXIT_USAGE_ERROR, validate_distinct_projects, validate_project_id

VERSION = "0.1.0"

EXIT_OK = 0
EXIT_PRECONDITION_ERROR = 1
EXIT_COMPLETED_WITH_FAILURES = 2

logger = logging.getLogger(__name__)


class ReplicatorArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit code 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE_ERROR, f"{self.prog}: error: {message}\n")


def cmd_version(args):
    """Show version information."""
    print(f"gcp-secret-replicator {VERSION}")


def _print_summary(summary: RunSummary, log_path: Optional[Path]) -> None:
    print()
    print(
        f"Done. Secrets processed: {colorize(str(summary.total), BOLD, sys.stdout)}  "
        f"✓ {colorize(str(summary.success_count), GREEN, sys.stdout)}  "
        f"✗ {colorize(str(summary.failed_count), RED, sys.stdout)}"
    )
    if summary.created_secrets:
        print(f"Created in destination: {', '.join(summary.created_secrets)}")
    if summary.failed_secrets:
        print(f"Needs attention: {', '.join(summary.failed_secrets)}")
    if log_path:
        print(f"Detailed log: {log_path}")


def cmd_replicate(args):
    """Replicate all secrets from the source project to the destination project."""
    validate_project_id(args.source_project, "source")
    validate_project_id(args.destination_project, "destination")
    validate_distinct_projects(args.source_project, args.destination_project)

    try:
        config = load_config(args.config)
        copy_all = args.all_versions or copy_all_versions_enabled(config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_PRECONDITION_ERROR)

    apply_credentials(config)
    mode = ReplicationMode.ALL_VERSIONS if copy_all else ReplicationMode.LATEST_ONLY

    log_dir = None if args.no_log_file else (args.log_dir or config["logging"]["log_dir"])
    level = "DEBUG" if args.verbose else config["logging"]["level"]
    log_path = configure_logging(args.source_project, args.destination_project, log_dir=log_dir, level=level)
    if log_path:
        logger.info(f"Log file: {log_path}")

    replicator = SecretReplicator(
        args.source_project,
        args.destination_project,
        mode=mode,
        client=GCPSecretClient(),
    )

    try:
        summary = replicator.run()
    except PreconditionError as e:
        logger.error(f"Error: {e}")
        sys.exit(EXIT_PRECONDITION_ERROR)

    _print_summary(summary, log_path)
    sys.exit(EXIT_COMPLETED_WITH_FAILURES if summary.has_failures else EXIT_OK)


def build_parser() -> argparse.ArgumentParser:
    parser = ReplicatorArgumentParser(
        prog="secret-replicator",
        description="Replicate GCP Secret Manager secrets from one project to another",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0 - Success (every secret replicated, or nothing to do)
  1 - Usage or precondition error (invalid arguments, bad config, project not accessible)
  2 - Completed with failures (at least one secret needs attention)

Environment variables:
  COPY_ALL_VERSIONS        - "true" to copy every enabled version (overrides config file)
  SECRET_REPLICATOR_CONFIG - Path to config file
  GOOGLE_APPLICATION_CREDENTIALS - Path to service account key JSON

Configuration:
  Default location: ~/.config/gcp-secret-replicator/config.yml
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    _version_parser = subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of gcp-secret-replicator"
    )

    replicate_parser = subparsers.add_parser(
        "replicate",
        help="Replicate secrets between projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Copy every secret from SOURCE_PROJECT to DEST_PROJECT.

Behavior:
  1. Creates missing destination secrets with the source's replication
     policy and labels (existing destination secrets are left as they are)
  2. Copies the latest ENABLED version of each secret, or every ENABLED
     version oldest first with --all-versions
  3. Streams payloads in memory; secret data is never written to disk

Re-running in latest-only mode does not add a version when the destination
already holds the same payload.
        """
    )
    replicate_parser.add_argument(
        "source_project",
        metavar="SOURCE_PROJECT",
        help="Project ID to read secrets from"
    )
    replicate_parser.add_argument(
        "destination_project",
        metavar="DEST_PROJECT",
        help="Project ID to replicate secrets into"
    )
    replicate_parser.add_argument(
        "--all-versions",
        action="store_true",
        help="Copy every ENABLED version instead of only the latest"
    )
    replicate_parser.add_argument(
        "--config",
        help="Path to config file (default: ~/.config/gcp-secret-replicator/config.yml)"
    )
    replicate_parser.add_argument(
        "--log-dir",
        help="Directory for the run log file (default: config logging.log_dir, else current directory)"
    )
    replicate_parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Do not write a run log file"
    )
    replicate_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    return parser


def main():
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Usage or precondition errors
        2 - Replication completed with failures
    """
    parser = build_parser()
    args = parser.parse_args()

    # If no command provided, show help and exit with usage error code
    if not args.command:
        parser.print_help()
        sys.exit(EXIT_USAGE_ERROR)

    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "replicate":
            cmd_replicate(args)
        else:
            parser.print_help()
            sys.exit(EXIT_USAGE_ERROR)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(EXIT_PRECONDITION_ERROR)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_PRECONDITION_ERROR)


if __name__ == "__main__":
    main()
