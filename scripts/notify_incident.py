"""Send the locality alert for an approved incident from the command line."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.dependencies import build_notification_service
from app.errors import BackendReadError, IncidentNotFoundError
from app.logging_config import configure_logging


logger = logging.getLogger("scripts.notify_incident")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Email every user in an approved incident's locality",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Notify for one incident
  python scripts/notify_incident.py 3f2c9a4e-0d5b-4a51-9a43-6f2b1e7c8d90

  # Print the summary as JSON
  python scripts/notify_incident.py 3f2c9a4e-0d5b-4a51-9a43-6f2b1e7c8d90 --json

Running the command twice sends the emails twice.
        """
    )
    parser.add_argument("incident_id", help="Identifier of an approved incident")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the summary as JSON instead of a one-line report"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging()

    service = build_notification_service()
    try:
        summary = service.dispatch(args.incident_id)
    except IncidentNotFoundError as e:
        logger.error("%s", e)
        return 2
    except BackendReadError:
        logger.exception("Could not read the incident store or profile directory")
        return 1

    if args.json:
        print(json.dumps(summary.to_response(), indent=2))
    else:
        print(
            f"{summary.message}: {summary.successful} sent, {summary.failed} failed"
        )
        for failure in summary.failures:
            print(f"  {failure.email}: {failure.error}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
