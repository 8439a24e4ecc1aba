from __future__ import annotations

import argparse
from datetime import datetime, timezone
import json
import sys
from typing import Optional

from drawapp.core.logging import configure_logging
from drawapp.cqrs.commands import draws as draws_commands
from drawapp.models.schemas import DrawOutcomeKind, SweepSummary


def _parse_now(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _print_summary(summary: SweepSummary) -> None:
    print(
        f"processed={summary.processed} succeeded={summary.succeeded} "
        f"failed={summary.failed} no_tickets={summary.no_tickets} "
        f"already_drawn={summary.already_drawn}"
    )
    for outcome in summary.results:
        if outcome.kind == DrawOutcomeKind.WINNER and outcome.winner:
            print(f"  {outcome.raffle_id}: winner #{outcome.winner.ticket_number}")
        elif outcome.kind == DrawOutcomeKind.FAILED:
            print(f"  {outcome.raffle_id}: failed ({outcome.error})")
        else:
            print(f"  {outcome.raffle_id}: {outcome.kind.value}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Draw winners for every raffle past its draw date")
    parser.add_argument("--now", help="ISO 8601 timestamp to sweep at (default: current UTC time)")
    parser.add_argument("--max-workers", type=int, default=None)
    parser.add_argument("--json", action="store_true", help="Print the summary as JSON")
    args = parser.parse_args(argv)

    configure_logging()
    summary = draws_commands.run_sweep(now=_parse_now(args.now), max_workers=args.max_workers)
    if args.json:
        print(json.dumps(summary.model_dump(mode="json"), indent=2))
    else:
        _print_summary(summary)
    return 1 if summary.failed else 0


if __name__ == "__main__":
    sys.exit(main())
