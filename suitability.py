"""
Suitability combination module.
Combines constraint masks with the fuzzy AND operator.
"""

import ee
from dataclasses import dataclass
from functools import reduce
from typing import Dict, Iterable

import config
from constraints import ConstraintMasks, evaluate_constraints
from retrieval import ClimateNormals


class SummaryError(Exception):
    """The suitable-area summary could not be computed."""

    stage = "summary"


@dataclass(frozen=True)
class SuitabilityResult:
    masks: ConstraintMasks
    combined: ee.Image       # 0/1 over every evaluated pixel
    suitability: ee.Image    # 1 where suitable, masked elsewhere


def fuzzy_and(masks: Iterable[ee.Image]) -> ee.Image:
    """
    Fuzzy AND of suitability masks.

    This is a strict per-pixel boolean AND, not a continuous t-norm:
    a pixel is 1 only where every mask is 1.
    """
    masks = list(masks)
    if not masks:
        raise ValueError("fuzzy_and needs at least one mask")
    return reduce(lambda acc, mask: acc.And(mask), masks)


def combine_masks(masks: Iterable[ee.Image]) -> ee.Image:
    """
    Combine masks and drop unsuitable pixels.

    Pixels failing any constraint are masked (transparent) rather
    than set to 0.

    Returns:
        ee.Image: Single band "suitability" image with value 1 or masked.
    """
    return fuzzy_and(masks).selfMask().rename("suitability")


def build_suitability(
    normals: ClimateNormals,
    soil_raw: ee.Image,
    thresholds: config.CropThresholds
) -> SuitabilityResult:
    """
    Evaluate every constraint and combine them.

    Nothing is computed server-side yet; the returned images describe
    the work and are materialized by an export or a reduction.
    """
    masks = evaluate_constraints(normals, soil_raw, thresholds)
    combined = fuzzy_and(masks).rename("combined_suit")
    suitability = combine_masks(masks)
    print("✓ Combined constraints with fuzzy AND")
    return SuitabilityResult(
        masks=masks, combined=combined, suitability=suitability
    )


def summarize_suitability(
    result: SuitabilityResult,
    region: ee.Geometry,
    scale: float = None,
    max_pixels: float = None
) -> Dict:
    """
    Count suitable pixels and area within a region.

    Args:
        result: Output of build_suitability.
        region: Region to summarize.
        scale: Reduction scale in meters. Defaults to config.EXPORT_SCALE.
        max_pixels: Reduction pixel limit. Defaults to config.MAX_PIXELS.

    Returns:
        dict: suitable_pixels, evaluated_pixels, suitable_fraction and
              suitable_area_km2.
    """
    scale = scale or config.EXPORT_SCALE
    max_pixels = max_pixels or config.MAX_PIXELS

    try:
        counts = ee.Image.cat([
            result.combined.rename("evaluated"),
            result.suitability.rename("suitable"),
        ]).reduceRegion(
            reducer=ee.Reducer.count(),
            geometry=region,
            scale=scale,
            maxPixels=max_pixels
        ).getInfo()

        area = ee.Image.pixelArea().updateMask(result.suitability).rename("area") \
            .reduceRegion(
                reducer=ee.Reducer.sum(),
                geometry=region,
                scale=scale,
                maxPixels=max_pixels
            ).getInfo()
    except ee.EEException as e:
        raise SummaryError(f"Could not summarize suitability: {e}") from e

    evaluated = counts.get("evaluated") or 0
    suitable = counts.get("suitable") or 0
    area_m2 = area.get("area") or 0

    return {
        "suitable_pixels": suitable,
        "evaluated_pixels": evaluated,
        "suitable_fraction": suitable / evaluated if evaluated else 0.0,
        "suitable_area_km2": area_m2 / 1e6,
    }


def print_suitability_summary(summary: Dict, region_name: str = "Region"):
    """Print a formatted suitability summary."""
    print(f"\nCorn Suitability - {region_name}")
    print("-" * 40)
    print(f"  Evaluated pixels: {summary['evaluated_pixels']}")
    print(f"  Suitable pixels:  {summary['suitable_pixels']}")
    print(f"  Suitable share:   {summary['suitable_fraction'] * 100:.1f}%")
    print(f"  Suitable area:    {summary['suitable_area_km2']:.1f} km²")
    print("-" * 40)
