from __future__ import annotations

import argparse
import sys
from typing import Sequence

import httpx

from restbucks.client.order_process import ContractViolationError, OrderProcess
from restbucks.infrastructure.observability.logging_config import configure_logging

SCENARIOS = {
    "existing": OrderProcess.process_existing_order,
    "new": OrderProcess.process_new_order,
    "cancel": OrderProcess.cancel_order_before_payment,
}


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Drive a restbucks order through its lifecycle by following links."
    )
    parser.add_argument("--base-url", default="http://localhost:8000")
    parser.add_argument("--scenario", choices=sorted(SCENARIOS), default="new")
    parser.add_argument("--poll-interval", type=float, default=2.0)
    parser.add_argument("--poll-timeout", type=float, default=60.0)
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging()

    with httpx.Client(base_url=args.base_url, timeout=10.0) as client:
        process = OrderProcess(
            client,
            poll_interval=args.poll_interval,
            poll_timeout=args.poll_timeout,
        )
        try:
            response = SCENARIOS[args.scenario](process)
        except (ContractViolationError, httpx.HTTPError) as exc:
            print(f"order process failed: {exc}")
            return 1

    print(f"order process passed: {args.scenario} ended with {response.status_code}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
