"""Example: drive the service layer directly (no HTTP).

Run with APP_ENV=testing to use the in-memory store.
"""

import json
import os
from datetime import datetime, timedelta, timezone

os.environ.setdefault("APP_ENV", "testing")

from src.timeclock.timeclock.main import create_container


def main():
    container = create_container()
    attendance = container.attendance_service

    start = datetime.now(timezone.utc).replace(hour=9, minute=0, second=0, microsecond=0)
    attendance.clock_in("emp-001", now=start)
    attendance.start_break("emp-001", now=start + timedelta(hours=3))
    attendance.end_break("emp-001", now=start + timedelta(hours=3, minutes=30))
    record = attendance.clock_out("emp-001", now=start + timedelta(hours=8))

    print(json.dumps(record.to_dict(), indent=2))
    print(json.dumps(container.report_service.history("emp-001").to_dict(), indent=2))


if __name__ == "__main__":
    main()
