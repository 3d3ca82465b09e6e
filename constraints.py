"""
Suitability constraint module.
Turns climate normals and soil pH into boolean (0/1) suitability masks.
"""

import ee
from dataclasses import dataclass
from functools import reduce
from typing import Sequence

import config
from retrieval import ClimateNormals, MonthlySeries


@dataclass(frozen=True)
class ConstraintMasks:
    """The four per-constraint masks, iterated in a fixed order."""

    precipitation: ee.Image
    growing_season: ee.Image
    kill_temperature: ee.Image
    soil_ph: ee.Image

    def __iter__(self):
        return iter((
            self.precipitation,
            self.growing_season,
            self.kill_temperature,
            self.soil_ph,
        ))

    def as_dict(self) -> dict:
        return {
            "precipitation": self.precipitation,
            "growing_season": self.growing_season,
            "kill_temperature": self.kill_temperature,
            "soil_ph": self.soil_ph,
        }


def in_range(image: ee.Image, low: float, high: float) -> ee.Image:
    """Pixels where low <= value <= high."""
    return image.gte(low).And(image.lte(high))


def annual_total(series: MonthlySeries) -> ee.Image:
    """
    Sum the twelve monthly images into an annual total.

    A pixel masked in any month is masked in the total.
    """
    return reduce(lambda total, image: total.add(image), series.ordered())


def precipitation_mask(
    precipitation: MonthlySeries,
    thresholds: config.CropThresholds
) -> ee.Image:
    """
    Optimal annual precipitation.

    Annual precipitation is the sum of the 12 monthly normals.

    Returns:
        ee.Image: 1 where min_precip <= annual total <= max_precip.
    """
    total = annual_total(precipitation).rename("annual_precip")
    return in_range(
        total, thresholds.min_precip, thresholds.max_precip
    ).rename("precip_suit")


def monthly_temperature_mask(
    image: ee.Image,
    thresholds: config.CropThresholds
) -> ee.Image:
    return in_range(
        image, thresholds.min_temp_optimal, thresholds.max_temp_optimal
    )


def growing_season_mask(
    mean_temperature: MonthlySeries,
    thresholds: config.CropThresholds,
    months: Sequence[int] = config.GROWING_SEASON_MONTHS
) -> ee.Image:
    """
    Optimal temperature over the whole growing season.

    Every listed month's mean temperature must lie inside the optimal
    range for the pixel to pass.

    Args:
        mean_temperature: Monthly mean temperature normals.
        thresholds: Crop thresholds.
        months: Growing season months. Defaults to May - August.

    Returns:
        ee.Image: 1 where all months are in range.
    """
    if not months:
        raise ValueError("At least one growing season month is required")

    monthly = [
        monthly_temperature_mask(mean_temperature.month(m), thresholds)
        for m in months
    ]
    combined = reduce(lambda acc, mask: acc.And(mask), monthly)
    return combined.rename("temp_suit_grow_season")


def kill_temperature_mask(
    min_temperature: MonthlySeries,
    thresholds: config.CropThresholds,
    month: int = config.KILL_TEMP_MONTH
) -> ee.Image:
    """
    Survival temperature.

    Returns:
        ee.Image: 1 where the month's minimum temperature >= kill_temp.
    """
    return (
        min_temperature.month(month)
        .gte(thresholds.kill_temp)
        .rename("kill_temp_suit")
    )


def soil_ph_mask(
    soil_raw: ee.Image,
    thresholds: config.CropThresholds,
    scale: float = config.SOIL_PH_SCALE
) -> ee.Image:
    """
    Optimal soil pH.

    SoilGrids stores pH * 10, so the raw value is divided by `scale` first.

    Returns:
        ee.Image: 1 where min_ph <= pH <= max_ph.
    """
    ph = soil_raw.divide(scale)
    return in_range(ph, thresholds.min_ph, thresholds.max_ph).rename("ph_suit")


def evaluate_constraints(
    normals: ClimateNormals,
    soil_raw: ee.Image,
    thresholds: config.CropThresholds
) -> ConstraintMasks:
    """
    Build every constraint mask for one crop.

    Args:
        normals: Precipitation, mean and minimum temperature normals.
        soil_raw: Raw soil pH image (pH * 10).
        thresholds: Crop thresholds.

    Returns:
        ConstraintMasks: One mask per constraint.
    """
    masks = ConstraintMasks(
        precipitation=precipitation_mask(normals.precipitation, thresholds),
        growing_season=growing_season_mask(normals.mean_temperature, thresholds),
        kill_temperature=kill_temperature_mask(normals.min_temperature, thresholds),
        soil_ph=soil_ph_mask(soil_raw, thresholds),
    )
    print("✓ Evaluated constraints: precipitation, growing season, "
          "kill temperature, soil pH")
    return masks
