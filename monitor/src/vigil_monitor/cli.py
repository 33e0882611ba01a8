"""Command line entry point: ``vigil serve`` and ``vigil check``.

``check`` exits 0 when both checks are healthy, 1 when either is not, and 2
when the cycle was cancelled or ran past its deadline.
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence

from vigil_commons.errors import CheckCancelledError
from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.application.monitor_cycle import CycleReport
from vigil_monitor.runtime.bootstrap import build_runtime, close_runtime_resources
from vigil_monitor.runtime.settings import Settings
from vigil_monitor.server import configure_from_settings
from vigil_monitor.server import main as serve_main


def _report_payload(report: CycleReport) -> dict[str, object]:
    liveness = report.liveness
    maintainers = report.maintainers
    return {
        "healthy": report.healthy,
        "heartbeat": None
        if liveness is None
        else {
            "source": liveness.source,
            "missed": liveness.missed,
            "windows_checked": liveness.windows_checked,
            "status": liveness.status,
        },
        "maintainers": None
        if maintainers is None
        else {"per_chain": dict(maintainers.per_chain), "status": maintainers.status},
        "errors": report.errors,
    }


def _run_check(timeout_seconds: float | None) -> int:
    settings = Settings.load()
    configure_from_settings(settings)
    runtime = build_runtime(settings)
    token = CancellationToken.with_timeout(timeout_seconds or settings.cycle_timeout_seconds)
    try:
        report = runtime.service.run_cycle(token)
    except CheckCancelledError as exc:
        print(json.dumps({"healthy": False, "errors": {"cycle": str(exc)}}))
        return 2
    finally:
        close_runtime_resources(runtime)
    print(json.dumps(_report_payload(report), sort_keys=True))
    return 0 if report.healthy else 1


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Monitor an Axelar validator's heartbeats and chain maintainers.")
    subcommands = parser.add_subparsers(dest="command", required=True)
    subcommands.add_parser("serve", help="Run the status API with the periodic check worker.")
    check = subcommands.add_parser("check", help="Run one check cycle and print a JSON summary.")
    check.add_argument("--timeout", type=float, default=None, help="Cycle deadline in seconds.")
    args = parser.parse_args(argv)

    if args.command == "serve":
        serve_main()
        return
    sys.exit(_run_check(args.timeout))


if __name__ == "__main__":
    main()
