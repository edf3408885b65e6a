#!/usr/bin/env python3
# ============================================================================
# scripts/lookup_tickets.py
# ============================================================================
"""
Look Up Outstanding Tickets

Runs one intake request from the shell: court portals and/or a photo of a
citation.

Usage:
    python scripts/lookup_tickets.py --source shavano --license D123456789 --state TX
    python scripts/lookup_tickets.py --source cibolo --license D123456789 --state TX --dob 1990-04-12
    python scripts/lookup_tickets.py --image ticket.jpg --json
    python scripts/lookup_tickets.py --list-sources
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from ticket_intake import IntakeRequest, SearchCriteria, create_intake_coordinator, missing_required_fields
from ticket_intake.config import logging_settings
from ticket_intake.scrapers import JurisdictionRegistry
from ticket_intake.utils import ValidationError, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find outstanding traffic citations")
    parser.add_argument("--source", action="append", default=[], help="Jurisdiction id (repeatable)")
    parser.add_argument("--license", dest="license_number", help="Driver license number")
    parser.add_argument("--state", help="License issuing state (2 letters)")
    parser.add_argument("--dob", help="Date of birth (YYYY-MM-DD or MM/DD/YYYY)")
    parser.add_argument("--first-name", help="First name")
    parser.add_argument("--last-name", help="Last name")
    parser.add_argument("--image", type=Path, help="Photo of a paper citation")
    parser.add_argument("--json", action="store_true", help="Print the raw response as JSON")
    parser.add_argument("--list-sources", action="store_true", help="List supported jurisdictions")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def print_summary(response: dict, result) -> None:
    records = result.records
    print(f"\nFound {len(records)} ticket(s)\n")
    for record in records:
        print(f"  {record.citation_id}  [{record.source}, confidence {record.confidence:.2f}]")
        if record.violation:
            print(f"    Violation: {record.violation}")
        if record.fine_amount is not None:
            print(f"    Fine:      ${record.fine_amount:,.2f}")
        if record.due_date:
            print(f"    Due:       {record.due_date}")
        if record.court_name:
            print(f"    Court:     {record.court_name}")
        missing = missing_required_fields(record)
        if missing:
            print(f"    Missing:   {', '.join(missing)}")

    for branch, kind in response["perSourceErrors"].items():
        print(f"\n  {branch}: {kind} - {result.error_messages.get(branch, '')}")

    if response["manualEntrySuggested"]:
        print("\nSome tickets may be missing. You can enter ticket details manually.")


def main():
    args = build_parser().parse_args()

    setup_logging(
        level="DEBUG" if args.verbose else logging_settings.LOG_LEVEL,
        log_file=logging_settings.LOG_FILE,
        format_json=logging_settings.LOG_JSON,
    )

    if args.list_sources:
        for source in JurisdictionRegistry().list_sources():
            print(f"{source['id']:<10} {source['name']:<15} requires: {', '.join(source['requiredFields'])}")
        sys.exit(0)

    image = None
    if args.image:
        if not args.image.exists():
            print(f"ERROR: Image not found: {args.image}")
            sys.exit(1)
        image = args.image.read_bytes()

    request = IntakeRequest(
        sources=tuple(args.source),
        criteria=SearchCriteria(
            license_number=args.license_number,
            state=args.state.upper() if args.state else None,
            date_of_birth=args.dob,
            first_name=args.first_name,
            last_name=args.last_name,
        ),
        image=image,
    )

    coordinator = create_intake_coordinator()
    try:
        result = asyncio.run(coordinator.run(request))
    except ValidationError as e:
        print("ERROR: Invalid request")
        for violation in e.violations:
            print(f"  - {violation}")
        sys.exit(2)

    response = result.to_response()
    if args.json:
        print(json.dumps(response, indent=2, default=str))
    else:
        print_summary(response, result)

    sys.exit(0)


if __name__ == "__main__":
    main()
