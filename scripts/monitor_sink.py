#!/usr/bin/env python3
"""
VCP Sink Monitor
================

Standalone script to watch a VCP server as a sink.

This script:
    1. Connects to a VCP server and sends the sink handshake
    2. Counts frames per message type for a configurable duration
    3. Logs connection and routing stats every report interval
    4. Reports final summary

Usage:
    python scripts/monitor_sink.py --duration 60
    python scripts/monitor_sink.py --url ws://localhost:8080 --sync --debug
"""

import argparse
import asyncio
import logging
import os
import sys
import time
from collections import Counter

from vcp_client import ANY_TYPE, RawFrame, SinkClient, load_config, setup_logging


logger = logging.getLogger("monitor_sink")


class TypeCounter:
    """Processor counting every frame by type."""

    def __init__(self) -> None:
        self.counts: Counter = Counter()

    def process(self, frame: RawFrame) -> None:
        self.counts[frame.type] += 1

    def supported_types(self):
        return [ANY_TYPE]


async def run_monitor(
    url: str,
    duration: int,
    report_interval: int,
    sync: bool,
    debug: bool,
) -> dict:
    """
    Run the monitor.

    Args:
        url: WebSocket URL of the VCP server
        duration: Monitor duration in seconds
        report_interval: Seconds between progress reports
        sync: Batch processing once per tick instead of on arrival
        debug: Log every raw frame

    Returns:
        Final metrics dict
    """
    counter = TypeCounter()
    client = SinkClient(url, settings=load_config())
    client.sync_process_mode = sync
    client.debug_mode = debug
    if debug:
        logging.getLogger("vcp_client.stream.router").setLevel(logging.DEBUG)
    client.add_processor(counter)

    logger.info(f"Monitoring {url} for {duration}s (sync={sync})")

    start_time = time.time()
    last_report_time = start_time

    async with client:
        try:
            while time.time() - start_time < duration:
                # One "tick": drain deferred processing, if any
                client.process_queue()

                if time.time() - last_report_time >= report_interval:
                    metrics = client.metrics()
                    logger.info("-" * 40)
                    logger.info(f"  State: {metrics['state']}")
                    logger.info(f"  Frames received: {metrics['router']['frames_received']}")
                    logger.info(f"  Parse errors: {metrics['router']['parse_errors']}")
                    logger.info(f"  Reconnects: {metrics['connection']['reconnect_count']}")
                    logger.info(f"  By type: {dict(counter.counts)}")
                    last_report_time = time.time()

                await asyncio.sleep(1 / 60)
        except asyncio.CancelledError:
            logger.info("Monitor interrupted")
            raise
        finally:
            client.process_queue()

    metrics = client.metrics()
    logger.info("=" * 60)
    logger.info("FINAL SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Total runtime: {time.time() - start_time:.1f} seconds")
    logger.info(f"Connects: {metrics['connection']['connects']}")
    logger.info(f"Frames received: {metrics['router']['frames_received']}")
    logger.info(f"Processor errors: {metrics['router']['processor_errors']}")
    logger.info(f"By type: {dict(counter.counts)}")
    logger.info("=" * 60)

    return {
        "frames_received": metrics["router"]["frames_received"],
        "by_type": dict(counter.counts),
        "connects": metrics["connection"]["connects"],
    }


def main():
    parser = argparse.ArgumentParser(description="Watch a VCP server as a data sink")
    parser.add_argument(
        "--url",
        type=str,
        default=os.environ.get("VCP_URL", "ws://localhost:8080"),
        help="WebSocket URL of the VCP server",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=60,
        help="Monitor duration in seconds (default: 60)",
    )
    parser.add_argument(
        "--report-interval",
        type=int,
        default=10,
        help="Seconds between progress reports (default: 10)",
    )
    parser.add_argument("--sync", action="store_true", help="Use deferred dispatch")
    parser.add_argument("--debug", action="store_true", help="Log raw frames")

    args = parser.parse_args()
    setup_logging(load_config())

    result = asyncio.run(run_monitor(
        url=args.url,
        duration=args.duration,
        report_interval=args.report_interval,
        sync=args.sync,
        debug=args.debug,
    ))

    sys.exit(0 if result["frames_received"] > 0 else 1)


if __name__ == "__main__":
    main()
