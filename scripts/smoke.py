# scripts/smoke.py
"""
Smoke Test Script for the PropTrail history engine.

Seeds one property with a small listing story (listed, a price drop,
viewings, a sale), then prints the timeline, a keyword search and the
analytics block.

Usage
-----
    $ python scripts/smoke.py
    $ python scripts/smoke.py --property demo-42 --file samples/events.json
"""

import argparse
import logging
import sys
import traceback
from datetime import UTC, datetime, timedelta
from pathlib import Path

from dotenv import load_dotenv

from proptrail.core.clock import FixedClock
from proptrail.core.contracts.events import EventSource, HistoryEventType
from proptrail.core.contracts.requests import (
    CreateHistoryEventRequest,
    GetTimelineRequest,
    HistorySearchQuery,
    TimelineImportOptions,
)
from proptrail.history import HistoryService

env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

AGENT = EventSource(type="agent", id="agent-7", name="Dana Realty", verified=True)


def _seed(service: HistoryService, clock: FixedClock, property_id: str) -> None:
    """Create a short listing history, one simulated day per event."""
    story = [
        (HistoryEventType.LISTED, "Listed for sale", {"kind": "listing", "action": "listed"}),
        (
            HistoryEventType.PRICE_DECREASE,
            "Price reduced",
            {"kind": "price", "old_price": 450000, "new_price": 425000},
        ),
        (
            HistoryEventType.VIEWING_COMPLETED,
            "First viewing",
            {"kind": "viewing", "viewer_id": "buyer-1", "viewer_type": "buyer", "duration": 30},
        ),
        (
            HistoryEventType.SOLD,
            "Sold",
            {"kind": "ownership", "action": "sold", "transaction_amount": 420000},
        ),
    ]
    for event_type, title, data in story:
        clock.advance(timedelta(days=1))
        resp = service.create_event(
            CreateHistoryEventRequest.model_validate(
                {
                    "property_id": property_id,
                    "type": event_type,
                    "title": title,
                    "description": f"{title} by {AGENT.name}",
                    "data": data,
                    "source": AGENT,
                }
            )
        )
        print(f"  {'✅' if resp.success else '❌'} {event_type.value}: {resp.message}")


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run PropTrail Smoke Test")
    parser.add_argument("--property", "-p", default="demo-1", help="Property identifier")
    parser.add_argument("--file", "-f", type=str, help="Optional JSON event file to import")
    args = parser.parse_args()

    clock = FixedClock(datetime(2024, 1, 1, 9, 0, tzinfo=UTC))
    service = HistoryService(clock=clock)

    try:
        if args.file:
            path = Path(args.file)
            if not path.exists():
                print(f"❌ File not found: {path}")
                return
            report = service.import_events(
                path.read_text(encoding="utf-8"),
                TimelineImportOptions(source="json", property_id=args.property),
            )
            print(f"\n📂 {report.message} ({len(report.rejected)} rejected)")
        else:
            print("\n📝 Seeding sample events")
            _seed(service, clock, args.property)
    except Exception as exc:
        print(f"\n❌ Seeding crashed: {exc}")
        traceback.print_exc()
        return

    timeline = service.get_property_timeline(GetTimelineRequest(property_id=args.property))
    print("\n" + "=" * 60)
    if timeline.timeline is None:
        print(f"❌ {timeline.message}")
        return
    print(f"🗂  Timeline ({timeline.timeline.pagination.total} events)")
    print("=" * 60)
    for event in timeline.timeline.events:
        print(f"  {event.display_order:>2}. {event.timestamp:%Y-%m-%d} {event.type.value:<20}")
        print(f"      {event.title} [{event.importance.value}]")

    found = service.search_events(HistorySearchQuery(keywords="price"))
    print(f"\n🔎 'price' matches: {found.total} · facets: {found.facets.event_types}")

    analytics = service.get_history_analytics(args.property)
    if analytics:
        print("\n📈 Analytics:")
        print(f"  - Days on market: {analytics.key_metrics.days_on_market}")
        print(f"  - Price changes : {analytics.key_metrics.price_changes}")
        for insight in analytics.timeline_insights:
            print(f"  - {insight}")


if __name__ == "__main__":
    main()
