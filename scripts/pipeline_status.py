"""
Check pipeline status - lead KPIs, stage breakdown and the most recent leads.
"""

import argparse
import sys
from collections import Counter
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import build_store, load_settings
from repositories.lead_repository import list_leads
from repositories.telemetry_repository import list_events
from services.pipeline_service import compute_kpis, empty_table_label, render_recent


def check_pipeline_status(language: str = "en", limit: int = 8):
    """Print KPIs, a stage/channel breakdown and the recent-leads table."""

    settings = load_settings()
    store = build_store(settings)
    kpis = compute_kpis(store)

    print("=" * 50)
    print("PIPELINE STATUS")
    print("=" * 50)
    print(f"Storage backend:           {settings.storage_backend}")
    print(f"Total leads:               {kpis.total}")
    print(f"Qualified (score >= 60):   {kpis.qualified_count}")
    print(f"Bookings:                  {kpis.booking_count}")
    print(f"Qualification rate:        %{kpis.qualification_rate}")
    print(f"Funnel events stored:      {len(list_events(store))}")
    print("=" * 50)

    print("\nBreakdown by channel and stage:")
    print("-" * 50)

    counts = Counter(f"{lead.type or 'unknown'} - {lead.stage or 'unknown'}" for lead in list_leads(store))
    for key in sorted(counts):
        print(f"{key}: {counts[key]}")

    print("-" * 50)

    print("\nRecent leads:")
    rows = render_recent(store, language, limit)
    if not rows:
        print(empty_table_label(language))
        return

    for row in rows:
        print(f"{row.created}  {row.channel:<12} {row.name:<24} {row.score:>3}  {row.stage:<10} {row.next_action}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print pipeline KPIs and recent leads")
    parser.add_argument("--language", "-l", default="en", choices=["en", "tr"])
    parser.add_argument("--limit", "-n", type=int, default=8)
    args = parser.parse_args()

    check_pipeline_status(language=args.language, limit=args.limit)
