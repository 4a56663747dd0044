"""
Console front end for the metrics dashboard.

Prints the chart payloads of one resource view as JSON, either once or on
a refresh loop (--watch) until interrupted.
"""

import argparse
import asyncio
import json
import sys
from typing import Optional, Sequence

from .config import config
from .engine import (
    DashboardSnapshot,
    DashboardState,
    MetricQueryEngine,
    RefreshScheduler,
    ResourceKind,
)
from .exceptions import ConfigMissing, FetchFailure
from .utils.aws_helpers import get_cloudwatch_client, get_rds_client
from .utils.logger import get_logger, set_log_level

logger = get_logger(__name__)

EXIT_FETCH_FAILURE = 1
EXIT_CONFIG_MISSING = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metrics-dashboard",
        description="Query CloudWatch metrics for a resource and print chart-ready series",
    )
    parser.add_argument("resource", choices=[r.value for r in ResourceKind], help="Resource kind to chart")
    parser.add_argument("--id", dest="identifier", help="Resource identifier (defaults to the configured one)")
    parser.add_argument("--region", help="AWS region (defaults to AWS_REGION)")
    parser.add_argument("--hours", type=float, help="Window length in hours")
    parser.add_argument("--period", type=int, help="Aggregation period in seconds")
    parser.add_argument("--metric", action="append", dest="metrics", help="Only chart this metric id (repeatable)")
    parser.add_argument("--watch", action="store_true", help="Keep refreshing until interrupted")
    parser.add_argument("--interval", type=float, help="Refresh interval in seconds for --watch")
    parser.add_argument("--iterations", type=int, help="Stop --watch after N applied refreshes")
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    return parser


def print_snapshot(snapshot: DashboardSnapshot) -> None:
    print(json.dumps(snapshot.to_payload(), indent=2, default=str), flush=True)


async def watch(
    engine: MetricQueryEngine,
    resource: ResourceKind,
    identifier: str,
    interval: float,
    hours: Optional[float] = None,
    period: Optional[int] = None,
    metrics: Optional[Sequence[str]] = None,
    iterations: Optional[int] = None,
) -> DashboardState:
    """
    Refresh a resource view every `interval` seconds and print each update.

    Runs until cancelled, or until `iterations` refreshes have been applied.
    """
    state = DashboardState()
    done = asyncio.Event()
    applied = 0

    def on_result(snapshot: DashboardSnapshot, generation: int) -> None:
        nonlocal applied
        state.apply(snapshot, generation)
        print_snapshot(snapshot)
        applied += 1
        if iterations is not None and applied >= iterations:
            done.set()

    scheduler = RefreshScheduler(
        lambda: engine.refresh_async(resource, identifier, hours=hours, period=period, metrics=metrics),
        on_result=on_result,
        interval=interval,
        on_error=state.record_error,
    )
    scheduler.start()
    try:
        await done.wait()
    finally:
        await scheduler.stop()
        await scheduler.wait_idle()
    return state


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the metrics-dashboard command."""
    args = build_parser().parse_args(argv)
    if args.log_level:
        set_log_level(args.log_level)

    resource = ResourceKind(args.resource)
    identifier = args.identifier or config.resources.identifier_for(resource.value)
    hours = args.hours if args.hours is not None else config.dashboard.window_hours
    period = args.period if args.period is not None else config.dashboard.period

    engine = MetricQueryEngine(
        get_cloudwatch_client(region=args.region),
        rds_client=get_rds_client(region=args.region) if resource is ResourceKind.RDS else None,
        label_format=config.dashboard.time_format,
    )

    try:
        # fail fast on missing configuration before any network call
        engine.build(resource, identifier, hours=hours, period=period, metrics=args.metrics)
    except ConfigMissing as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_MISSING
    except ValueError as e:
        logger.error(f"Invalid query: {e}")
        return EXIT_CONFIG_MISSING

    if args.watch:
        interval = args.interval if args.interval is not None else config.dashboard.refresh_seconds
        if interval <= 0:
            logger.error(f"Invalid refresh interval: {interval} (must be positive)")
            return EXIT_CONFIG_MISSING
        try:
            asyncio.run(
                watch(engine, resource, identifier, interval, hours=hours, period=period,
                      metrics=args.metrics, iterations=args.iterations)
            )
        except KeyboardInterrupt:
            logger.info("Interrupted, exiting")
        return 0

    try:
        snapshot = engine.refresh(resource, identifier, hours=hours, period=period, metrics=args.metrics)
    except FetchFailure as e:
        logger.error(f"Could not fetch metrics: {e}")
        return EXIT_FETCH_FAILURE

    print_snapshot(snapshot)
    return 0


if __name__ == "__main__":
    sys.exit(main())
