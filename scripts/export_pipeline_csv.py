#!/usr/bin/env python3
"""
Pipeline Export Script

Exports the lead ledger to CSV in the CRM import format (33 fixed columns).
Uses the storage backend configured in .env (PIPELINE_STORAGE_BACKEND).

Usage:
    python export_pipeline_csv.py --output crm-leads.csv
    python export_pipeline_csv.py --output crm-leads.csv --neutralize-formulas
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import build_store, load_settings
from services.csv_export_service import CSV_COLUMNS, EXPORT_FILENAME
from services.pipeline_service import compute_kpis, export_csv
from services.telemetry_service import TelemetrySink


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Export pipeline leads to CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export all leads
  python export_pipeline_csv.py --output crm-leads.csv

  # Strip spreadsheet formula triggers (=, +, -, @) from cell values
  python export_pipeline_csv.py --output crm-leads.csv --neutralize-formulas
        """
    )

    parser.add_argument(
        "--output",
        "-o",
        default=EXPORT_FILENAME,
        help=f"Path to output CSV file (default: {EXPORT_FILENAME})"
    )

    parser.add_argument(
        "--neutralize-formulas",
        action="store_true",
        help="Strip leading formula characters from every cell"
    )

    args = parser.parse_args()

    try:
        settings = load_settings()
        store = build_store(settings)

        print(f"Reading leads from '{settings.storage_backend}' storage...")
        export = export_csv(
            store,
            telemetry=TelemetrySink(store),
            neutralize_formulas=args.neutralize_formulas,
        )

        if export is None:
            print("No leads to export")
            return 1

        with open(args.output, "w", newline="", encoding="utf-8") as f:
            f.write(export.content)

        kpis = compute_kpis(store)

        print()
        print("=" * 60)
        print("EXPORT SUMMARY")
        print("=" * 60)
        print(f"Total leads exported: {export.row_count}")
        print(f"  Qualified (>= 60): {kpis.qualified_count}")
        print(f"  Bookings:          {kpis.booking_count}")
        print(f"CSV columns:          {len(CSV_COLUMNS)}")
        print()
        print(f"Output file: {args.output}")
        print("=" * 60)

        return 0

    except KeyboardInterrupt:
        print("\n\nExport interrupted by user")
        return 130

    except Exception as e:
        print(f"\nERROR: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
