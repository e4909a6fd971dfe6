"""Background worker that watches connectivity and drains the offline queue."""

from __future__ import annotations

import argparse
import logging

from fleetsync.core.config import settings
from fleetsync.core.logging_config import setup_logging
from fleetsync.services.context import build_context

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the offline queue reconnect monitor.")
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help=f"Connectivity probe interval in seconds (default: {settings.connectivity_poll_seconds}).",
    )
    parser.add_argument(
        "--oneshot",
        action="store_true",
        help="Run a single drain pass instead of looping.",
    )
    return parser.parse_args()


def main() -> int:
    setup_logging(service_name="reconnect-monitor")
    args = parse_args()
    ctx = build_context(settings)
    try:
        if args.oneshot:
            result = ctx.engine.run_drain_pass()
            logger.info(
                "One-shot drain complete (succeeded=%d, abandoned=%d, pending=%d)",
                result.succeeded,
                result.permanently_failed,
                ctx.queue.get_queue_length(),
            )
            return 0
        if args.poll_interval is not None:
            ctx.monitor.poll_seconds = args.poll_interval
        ctx.monitor.run_forever()
    except KeyboardInterrupt:  # pragma: no cover - manual shutdown
        logger.info("Shutting down reconnect monitor")
    finally:
        ctx.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
