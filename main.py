#!/usr/bin/env python3
"""
Corn Suitability Analysis
Finds where climate and soil meet the FAO EcoCrop optimal ranges for corn.

Usage:
    python main.py                 # Run full pipeline and start the export
    python main.py --summary       # Also print suitable area in the region
    python main.py --thumbnails    # Also print thumbnail URLs
    python main.py --wait          # Wait for the export to finish
    python main.py --dry-run       # Build everything, do not start the export
"""

import argparse
import sys

import config
from auth import setup_gee
from retrieval import (
    DataUnavailableError,
    create_export_region,
    load_climate_normals,
    load_soil_ph,
)
from suitability import (
    SummaryError,
    build_suitability,
    print_suitability_summary,
    summarize_suitability,
)
from export import ExportError, export_suitability, wait_for_task
from visualization import get_constraint_thumbnails


def print_header(thresholds: config.CropThresholds, settings: config.ExportSettings):
    """Print application header."""
    print("\n" + "=" * 60)
    print("  CORN SUITABILITY ANALYSIS")
    print("  PRISM climate normals + SoilGrids soil pH")
    print("=" * 60)
    print(f"\n  Precipitation: {thresholds.min_precip} - {thresholds.max_precip} mm/yr")
    print(f"  Mean temp (May-Aug): {thresholds.min_temp_optimal} - "
          f"{thresholds.max_temp_optimal} °C")
    print(f"  April min temp: >= {thresholds.kill_temp} °C")
    print(f"  Soil pH: {thresholds.min_ph} - {thresholds.max_ph}")
    print(f"  Region: {list(settings.region)}  Scale: {settings.scale}m  "
          f"CRS: {settings.crs}")
    print("\n" + "-" * 60 + "\n")


def run_pipeline(
    thresholds: config.CropThresholds = None,
    settings: config.ExportSettings = None,
    start_export: bool = True,
    summarize: bool = False,
    thumbnails: bool = False,
    wait_for_export: bool = False
) -> dict:
    """
    Run the full processing pipeline.

    Args:
        thresholds: Crop thresholds. Defaults to config.CORN_THRESHOLDS.
        settings: Export settings. Defaults to config.DEFAULT_EXPORT.
        start_export: Whether to start the export task.
        summarize: Whether to compute suitable area in the export region.
        thumbnails: Whether to generate thumbnail URLs.
        wait_for_export: Whether to wait for the export to complete.

    Returns:
        dict: Results including masks, suitability image and export task.

    Raises:
        DataUnavailableError: If an input dataset cannot be loaded.
        ExportError: If the export cannot be created, started or monitored.
        SummaryError: If the requested summary cannot be computed.
    """
    thresholds = thresholds or config.CORN_THRESHOLDS
    settings = settings or config.DEFAULT_EXPORT
    results = {}

    # Step 1: Load climate normals and soil pH
    print("\n[1/4] Loading climate and soil data...")
    print("-" * 40)

    normals = load_climate_normals()
    soil_raw = load_soil_ph()

    # Step 2 + 3: Evaluate constraints and combine
    print("\n[2/4] Evaluating constraints...")
    print("-" * 40)

    result = build_suitability(normals, soil_raw, thresholds)
    results["masks"] = result.masks
    results["suitability"] = result.suitability

    print("\n[3/4] Preparing export region...")
    print("-" * 40)

    region = create_export_region(settings.region)
    results["region"] = region

    # Step 4: Export
    print("\n[4/4] Exporting suitability raster...")
    print("-" * 40)

    task = export_suitability(result.suitability, settings, start_task=start_export)
    results["export_task"] = task

    # Optional reports run after the export task exists
    if summarize:
        summary = summarize_suitability(
            result, region, scale=settings.scale, max_pixels=settings.max_pixels
        )
        results["summary"] = summary
        print_suitability_summary(summary, settings.description)

    if thumbnails:
        results["thumbnails"] = get_constraint_thumbnails(result, region)

    if start_export and wait_for_export:
        print("\nWaiting for export to complete...")
        results["export_completed"] = wait_for_task(task)

    print("\n" + "=" * 60)
    print("  PROCESSING COMPLETE")
    print("=" * 60 + "\n")

    return results


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Corn Suitability Analysis")
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print suitable pixel count and area in the export region"
    )
    parser.add_argument(
        "--thumbnails",
        action="store_true",
        help="Print thumbnail URLs for the result and each constraint"
    )
    parser.add_argument(
        "--wait",
        action="store_true",
        help="Wait for the export to complete"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Create the export task without starting it"
    )

    args = parser.parse_args(argv)

    thresholds = config.CORN_THRESHOLDS
    settings = config.DEFAULT_EXPORT

    print_header(thresholds, settings)

    print("[SETUP] Initializing Google Earth Engine...")
    print("-" * 40)

    if not setup_gee():
        print("\n✗ Failed to initialize GEE. Exiting.")
        sys.exit(1)

    try:
        results = run_pipeline(
            thresholds,
            settings,
            start_export=not args.dry_run,
            summarize=args.summary,
            thumbnails=args.thumbnails,
            wait_for_export=args.wait
        )
    except (DataUnavailableError, ExportError, SummaryError) as e:
        print(f"\n✗ Pipeline failed at stage '{e.stage}': {e}")
        sys.exit(1)

    if "thumbnails" in results:
        print("Thumbnails:")
        for name, url in results["thumbnails"].items():
            print(f"  - {name}: {url}")

    if results.get("export_completed") is False:
        sys.exit(1)

    print("\nDone!")


if __name__ == "__main__":
    main()
