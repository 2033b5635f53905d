#!/usr/bin/env python3
"""
Offline Sync Script

Operates the offline client runtime of a kiosk or mobile shell from the
command line, against the same data directory the device uses.

Usage:
    # Queue depth per kind, age of the oldest action, cache stores
    python scripts/offline_sync.py status

    # Probe the server and replay queued clock actions once
    python scripts/offline_sync.py drain

    # Keep probing and draining every --interval seconds (Ctrl-C to stop)
    python scripts/offline_sync.py watch --interval 60

    # Drop API cache entries older than the retention window
    python scripts/offline_sync.py purge

    # Remove every offline cache store (queued actions are kept)
    python scripts/offline_sync.py clear-cache

Environment Variables:
    TIMECLOCK_BASE_URL: server origin (default: http://localhost:8000)
    TIMECLOCK_DATA_DIR: where the queue and cache databases live
    See offline.settings.OfflineSettings.from_env for the rest.
"""

import argparse
import asyncio
import json
import signal
import sys

from infrastructure.logging import configure_logging
from offline import OfflineRuntime, OfflineSettings


async def show_status(runtime: OfflineRuntime) -> int:
    status = await runtime.status()
    print(json.dumps(status, indent=2, ensure_ascii=False))
    return 0


async def drain_once(runtime: OfflineRuntime) -> int:
    online = await runtime.monitor.probe(runtime.http, runtime.settings.health_path)
    if not online:
        print(f"Server not reachable at {runtime.settings.base_url}, nothing sent")
        return 1

    report = await runtime.engine.drain()
    if report.error:
        print(f"Error: could not read the queue: {report.error}")
        return 1

    print(f"Synced {report.synced}/{report.attempted} action(s)")
    for action_id in report.synced_ids:
        print(f"  sent: {action_id}")
    for action_id in report.stuck_ids:
        print(f"  sent but still queued: {action_id}")
    return 0 if report.failed == 0 and report.stuck == 0 else 2


async def watch(runtime: OfflineRuntime, interval: float) -> int:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers; Ctrl-C still interrupts.
            pass

    await runtime.scheduler.run_periodic(interval=interval, stop=stop)
    return 0


async def purge(runtime: OfflineRuntime) -> int:
    removed = await runtime.scheduler.purge_api_cache()
    print(f"Purged {removed} expired API cache entr{'y' if removed == 1 else 'ies'}")
    return 0


async def clear_cache(runtime: OfflineRuntime) -> int:
    removed = await runtime.transport.clear_caches()
    print(f"Removed {removed} cache store(s)")
    return 0


async def run(args: argparse.Namespace) -> int:
    settings = OfflineSettings.from_env()
    if args.base_url:
        settings.base_url = args.base_url

    runtime = OfflineRuntime.from_settings(settings)
    try:
        if args.action == "status":
            return await show_status(runtime)
        if args.action == "drain":
            return await drain_once(runtime)
        if args.action == "watch":
            return await watch(runtime, args.interval or settings.sync_interval)
        if args.action == "purge":
            return await purge(runtime)
        if args.action == "clear-cache":
            return await clear_cache(runtime)
        return 1
    finally:
        await runtime.aclose()


def main():
    parser = argparse.ArgumentParser(
        description="Inspect and drain the offline clock action queue"
    )
    parser.add_argument(
        "action",
        choices=["status", "drain", "watch", "purge", "clear-cache"],
        help="Action to perform"
    )
    parser.add_argument(
        "--base-url",
        help="Server origin (overrides TIMECLOCK_BASE_URL)"
    )
    parser.add_argument(
        "--interval",
        type=float,
        help="Seconds between sync attempts (for watch)"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug logging"
    )
    
    args = parser.parse_args()

    configure_logging(is_production=False, level="DEBUG" if args.verbose else "INFO")
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
