#!/usr/bin/env python3
"""Replay the reference product scenario against an in-memory ledger.

Usage:
  python scripts/run_scenario.py
  python scripts/run_scenario.py --step-seconds 60 --log-format json
"""

import json
import sys

import click

sys.path.insert(0, "src")


@click.command()
@click.option("--step-seconds", default=1.0, type=float, help="Clock advance between transactions")
@click.option("--log-format", default="console", help="json or console")
def main(step_seconds: float, log_format: str) -> None:
    """Create, query and transfer a product, printing each response."""
    from supply_ledger.core.clock import SimClock
    from supply_ledger.host import LocalLedger
    from supply_ledger.observability.logger import setup_logging
    from supply_ledger.storage import MemoryStateStore

    setup_logging(level="INFO", format=log_format)
    clock = SimClock()
    ledger = LocalLedger(MemoryStateStore(), clock=clock)

    steps = [
        ("CreateProduct", ("p1", "Laptop", "CompanyA", "High-end gaming laptop", "Electronics")),
        ("QueryProduct", ("p1",)),
        ("TransferOwnership", ("p1", "CompanyC")),
        ("QueryProduct", ("p1",)),
        ("GetAllProducts", ()),
    ]
    for function, args in steps:
        result = ledger.submit(function, *args)
        response = result.response
        status = "ok" if response.ok else f"{response.error_kind}: {response.message}"
        click.echo(f"{function}{args} -> {status}")
        if response.payload:
            click.echo(json.dumps(response.payload_json(), indent=2))
        clock.advance(step_seconds)


if __name__ == "__main__":
    main()
