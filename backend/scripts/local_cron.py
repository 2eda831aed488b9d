"""Local stand-in for the production cron.

Calls the due-schedule endpoint at the top of every minute and prints the
summary. Leave it running next to the dev server.

Usage:
    cd backend
    uv run python scripts/local_cron.py
    uv run python scripts/local_cron.py --url http://localhost:8000/api/cron/execute-schedules
"""

import argparse
import asyncio
from datetime import datetime, timezone

import httpx

DEFAULT_URL = "http://localhost:8000/api/cron/execute-schedules"


async def trigger_once(client: httpx.AsyncClient, url: str) -> None:
    timestamp = datetime.now(timezone.utc).isoformat()
    print(f"[Local Cron] {timestamp} - Triggering scheduled tasks...")

    try:
        resp = await client.get(url)
        data = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        print(f"[Local Cron] {timestamp} - Failed to trigger: {e}")
        return

    if not data.get("success"):
        print(f"[Local Cron] {timestamp} - Error: {data.get('error')}")
        return

    if data.get("executed", 0) == 0:
        print(f"[Local Cron] {timestamp} - No schedules due")
        return

    print(f"[Local Cron] {timestamp} - Executed {data['executed']} schedule(s)")
    for result in data.get("results", []):
        suffix = f" ({result['message']})" if result.get("message") else ""
        print(f"[Local Cron]   - {result['schedule_name']}: {result['status']}{suffix}")


async def run(url: str) -> None:
    print(f"[Local Cron] Will trigger: {url}")
    print("[Local Cron] Press Ctrl+C to stop\n")

    # Server-side runs can take up to 300s
    async with httpx.AsyncClient(timeout=300.0) as client:
        while True:
            now = datetime.now(timezone.utc)
            await asyncio.sleep(60 - now.second - now.microsecond / 1_000_000)
            await trigger_once(client, url)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--url", default=DEFAULT_URL)
    args = parser.parse_args()
    try:
        asyncio.run(run(args.url))
    except KeyboardInterrupt:
        print("\n[Local Cron] Stopped")
