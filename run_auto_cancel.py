#!/usr/bin/env python3
"""
Auto-cancel trigger for cron or a manual run.

Calls the maintenance endpoint with the service credential and prints the
result. Exits non-zero when the run failed.

    SERVICE_ROLE_KEY=... python run_auto_cancel.py --url http://localhost:8000
"""

import argparse
import os
import sys

import requests

DEFAULT_PREFIX = "/api/v1"
ENDPOINT = "/maintenance/auto-cancel-appointments"


def trigger_auto_cancel(base_url, service_key, timeout=30, prefix=DEFAULT_PREFIX):
    """POST to the trigger endpoint and return (status_code, body)."""
    path = "/".join(part for part in (prefix.strip("/"), ENDPOINT.strip("/")) if part)
    response = requests.post(
        base_url.rstrip("/") + "/" + path,
        headers={"Authorization": f"Bearer {service_key}"},
        timeout=timeout,
    )
    try:
        body = response.json()
    except ValueError:
        body = {"success": False, "error": response.text}
    return response.status_code, body


def main(argv=None):
    parser = argparse.ArgumentParser(description="Cancel overdue pending appointments")
    parser.add_argument("--url", default=os.getenv("MAINTENANCE_BASE_URL", "http://localhost:8000"))
    parser.add_argument("--prefix", default=os.getenv("API_V1_PREFIX", DEFAULT_PREFIX))
    parser.add_argument("--timeout", type=float, default=30)
    args = parser.parse_args(argv)

    service_key = os.getenv("SERVICE_ROLE_KEY")
    if not service_key:
        print("❌ SERVICE_ROLE_KEY is not set")
        return 2

    print("🕒 Triggering overdue appointment cleanup...")
    try:
        status_code, body = trigger_auto_cancel(
            args.url, service_key, timeout=args.timeout, prefix=args.prefix
        )
    except requests.RequestException as e:
        print(f"❌ Could not reach {args.url}: {e}")
        return 1

    if status_code == 200 and body.get("success"):
        print(f"✅ {body.get('message')}")
        for appointment_id in body.get("eliminatedAppointments", []):
            print(f"   - {appointment_id}")
        return 0

    print(f"❌ Auto-cancel failed ({status_code}): {body.get('error')}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
