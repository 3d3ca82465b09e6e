"""
Climate and soil data retrieval module.
Loads PRISM monthly normals and SoilGrids soil pH from GEE.
"""

import ee
from dataclasses import dataclass
from typing import Dict, Sequence

import config


class DataUnavailableError(Exception):
    """An input dataset could not be served by Earth Engine."""

    stage = "load"


@dataclass(frozen=True)
class MonthlySeries:
    """Twelve monthly normals of a single band, indexed 1-12."""

    band: str
    collection_id: str
    images: Dict[int, ee.Image]

    def month(self, month: int) -> ee.Image:
        if month not in self.images:
            raise ValueError(f"Month must be in 1-12, got {month}")
        return self.images[month]

    def ordered(self) -> list:
        """Images in calendar order (January first)."""
        return [self.images[m] for m in sorted(self.images)]


@dataclass(frozen=True)
class ClimateNormals:
    precipitation: MonthlySeries
    mean_temperature: MonthlySeries
    min_temperature: MonthlySeries


def load_monthly_normals(
    band: str,
    collection_id: str = None
) -> MonthlySeries:
    """
    Load one band of the monthly climate normals.

    The collection is expected to hold one image per calendar month in
    calendar order (index 0 is January).

    Args:
        band: Band to select (e.g. "ppt", "tmean", "tmin").
        collection_id: Normals collection. Defaults to
                       config.CLIMATE_NORMALS_COLLECTION.

    Returns:
        MonthlySeries: Images keyed by month number.

    Raises:
        DataUnavailableError: If the collection or band cannot be served, or
                              it does not hold exactly 12 images.
    """
    collection_id = collection_id or config.CLIMATE_NORMALS_COLLECTION

    try:
        collection = ee.ImageCollection(collection_id).select(band)
        count = collection.size().getInfo()
    except ee.EEException as e:
        raise DataUnavailableError(
            f"Could not load band '{band}' from {collection_id}: {e}"
        ) from e

    if count != config.MONTHS_PER_YEAR:
        raise DataUnavailableError(
            f"Expected {config.MONTHS_PER_YEAR} monthly images for '{band}' "
            f"in {collection_id}, found {count}"
        )

    image_list = collection.toList(count)
    images = {
        month: ee.Image(image_list.get(month - 1))
        for month in range(1, config.MONTHS_PER_YEAR + 1)
    }

    print(f"✓ Loaded monthly normals: {collection_id} [{band}]")
    return MonthlySeries(band=band, collection_id=collection_id, images=images)


def load_climate_normals(collection_id: str = None) -> ClimateNormals:
    """
    Load precipitation, mean temperature and minimum temperature normals.

    Raises:
        DataUnavailableError: If any of the three bands is unavailable.
    """
    return ClimateNormals(
        precipitation=load_monthly_normals(config.PRECIP_BAND, collection_id),
        mean_temperature=load_monthly_normals(config.TMEAN_BAND, collection_id),
        min_temperature=load_monthly_normals(config.TMIN_BAND, collection_id),
    )


def load_soil_ph(asset_id: str = None, band: str = None) -> ee.Image:
    """
    Load the raw soil pH image (pH * 10).

    Args:
        asset_id: Soil pH asset. Defaults to config.SOIL_PH_ASSET.
        band: Depth band. Defaults to config.SOIL_PH_BAND.

    Returns:
        ee.Image: Single band soil pH image, not yet unit corrected.

    Raises:
        DataUnavailableError: If the asset or band cannot be served.
    """
    asset_id = asset_id or config.SOIL_PH_ASSET
    band = band or config.SOIL_PH_BAND

    try:
        image = ee.Image(asset_id).select(band)
        band_names = image.bandNames().getInfo()
    except ee.EEException as e:
        raise DataUnavailableError(
            f"Could not load band '{band}' from {asset_id}: {e}"
        ) from e

    if band not in band_names:
        raise DataUnavailableError(f"Band '{band}' not found in {asset_id}")

    print(f"✓ Loaded soil pH: {asset_id} [{band}]")
    return image


def create_export_region(bounds: Sequence[float]) -> ee.Geometry:
    """
    Create a rectangular region from (west, south, east, north).

    Args:
        bounds: Rectangle corners in degrees.

    Returns:
        ee.Geometry: Rectangle geometry.
    """
    west, south, east, north = bounds
    region = ee.Geometry.Rectangle([west, south, east, north])
    print(f"✓ Created export region: [{west}, {south}, {east}, {north}]")
    return region
