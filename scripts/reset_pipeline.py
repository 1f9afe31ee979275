"""
Reset the pipeline - delete ALL leads, funnel events and attribution.

This cannot be undone. Export the leads first if you need them
(scripts/export_pipeline_csv.py).
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import build_store, load_settings
from repositories.lead_repository import list_leads
from repositories.telemetry_repository import list_events
from services.pipeline_service import reset_all
from services.telemetry_service import TelemetrySink


def reset_pipeline(confirmed: bool) -> int:
    """Clear the pipeline after printing what will be removed."""

    settings = load_settings()
    store = build_store(settings)

    print("=" * 60)
    print("RESETTING PIPELINE")
    print("=" * 60)
    print("WARNING: This will delete ALL leads, events and attribution.")
    print(f"Storage backend: {settings.storage_backend}")
    print("=" * 60)

    lead_count = len(list_leads(store))
    event_count = len(list_events(store))
    print(f"\nCurrently stored leads:  {lead_count}")
    print(f"Currently stored events: {event_count}")

    if not confirmed:
        print("\nNothing deleted. Re-run with --yes to confirm the reset.")
        return 1

    result = reset_all(store, confirm=True, telemetry=TelemetrySink(store))

    if result.errors:
        print(f"[WARNING] Storage errors during reset: {'; '.join(result.errors)}")
    else:
        print(f"[SUCCESS] Removed {lead_count} leads and {event_count} events.")

    print("\n" + "=" * 60)
    print("PIPELINE RESET COMPLETE")
    print("=" * 60)
    print(f"Leads remaining:  {len(list_leads(store))}")
    print(f"Events remaining: {len(list_events(store))} (the reset itself is recorded)")
    print("=" * 60)
    return 0 if not result.errors else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Irreversibly clear the lead pipeline")
    parser.add_argument("--yes", action="store_true", help="Confirm the destructive reset")
    args = parser.parse_args()

    sys.exit(reset_pipeline(confirmed=args.yes))
