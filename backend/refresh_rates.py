"""
Refresh metal rates from the configured price feed.

Meant to be run by an outside scheduler (cron, systemd timer) or by hand.
Exits non-zero when the feed is unavailable or no rate could be applied.
"""
import json
import sys

from suvarna.core.config import settings
from suvarna.core.database import SessionLocal, init_db
from suvarna.core.logger import configure_logging
from suvarna.core.serialization_helpers import serialize_datetime, serialize_rate
from suvarna.services import rate_ledger
from suvarna.services.rate_refresh import FAILED, refresh_from_external_source


def main() -> int:
    configure_logging(settings.log_level)
    init_db()

    result = refresh_from_external_source()
    print(f"{result.outcome}: {result.message}")
    for error in result.errors:
        print(f"  - {error}")

    with SessionLocal() as db:
        summary = rate_ledger.get_rates_summary(db)
        print(json.dumps({
            "gold": [serialize_rate(r) for r in summary["gold"]],
            "silver": [serialize_rate(r) for r in summary["silver"]],
            "last_updated": serialize_datetime(summary["last_updated"]),
            "total_rates": summary["total_rates"],
        }, indent=2))

    return 1 if result.outcome == FAILED else 0


if __name__ == "__main__":
    sys.exit(main())
