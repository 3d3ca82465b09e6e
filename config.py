"""
Configuration settings for the corn suitability analysis.
Crop parameters come from the FAO EcoCrop database (sweet corn).
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple


# =============================================================================
# INPUT DATASETS
# =============================================================================

# PRISM 30-year climate normals (1981-2010), one image per calendar month
CLIMATE_NORMALS_COLLECTION = "OREGONSTATE/PRISM/Norm81m"

# Band names within the PRISM normals
PRECIP_BAND = "ppt"      # mm
TMEAN_BAND = "tmean"     # deg C
TMIN_BAND = "tmin"       # deg C

# SoilGrids soil pH (H2O), stored as pH * 10
SOIL_PH_ASSET = "projects/soilgrids-isric/phh2o_mean"
SOIL_PH_BAND = "phh2o_0-5cm_mean"

# Number of monthly normals expected in each climate series
MONTHS_PER_YEAR = 12

# =============================================================================
# CROP PARAMETERS: CORN
# =============================================================================

# Optimal mean temperature range (deg C)
CORN_TEMP_OPTIMAL_MIN = 16
CORN_TEMP_OPTIMAL_MAX = 24

# Optimal annual precipitation range (mm)
CORN_PRECIP_OPTIMAL_MIN = 800
CORN_PRECIP_OPTIMAL_MAX = 1500

# Optimal soil pH range
CORN_PH_OPTIMAL_MIN = 5.5
CORN_PH_OPTIMAL_MAX = 6.8

# Killing temperature: base threshold plus a safety margin (deg C)
KILL_TEMP_BASE = 0
KILL_TEMP_MARGIN = 4

# Growing season months (May - August) checked against the optimal range
GROWING_SEASON_MONTHS = (5, 6, 7, 8)

# Month whose minimum temperature must stay above the killing temperature
KILL_TEMP_MONTH = 4

# SoilGrids pH unit correction
SOIL_PH_SCALE = 10

# =============================================================================
# EXPORT SETTINGS
# =============================================================================

# Export destination: "drive", "cloud", "asset"
EXPORT_DESTINATION = "drive"

# Export task description (also the output file name)
EXPORT_DESCRIPTION = "CornSuitabilityGEE"

# Google Drive folder name (None exports to the Drive root)
DRIVE_FOLDER = None

# Export scale in meters (resolution)
EXPORT_SCALE = 250

# Export region as (west, south, east, north) in degrees
EXPORT_REGION = (-77.0, 39.0, -75.0, 41.0)

# Output coordinate reference system
EXPORT_CRS = "EPSG:3857"

# Maximum pixels for export (GEE limit is 1e13)
MAX_PIXELS = 1e9

# Coordinate reference systems accepted for export ("AUTHORITY:CODE")
CRS_PATTERN = re.compile(r"^(EPSG|ESRI|SR-ORG):\d+$")

# =============================================================================
# VISUALIZATION SETTINGS
# =============================================================================

VIS_PARAMS = {
    "min": 0,
    "max": 1,
    "palette": ["white", "green"],
}

THUMBNAIL_DIMENSIONS = 512


@dataclass(frozen=True)
class CropThresholds:
    """Agronomic thresholds for a single crop. All ranges are inclusive."""

    min_temp_optimal: float
    max_temp_optimal: float
    min_precip: float
    max_precip: float
    min_ph: float
    max_ph: float
    kill_temp: float

    def __post_init__(self):
        for name, low, high in (
            ("temperature", self.min_temp_optimal, self.max_temp_optimal),
            ("precipitation", self.min_precip, self.max_precip),
            ("pH", self.min_ph, self.max_ph),
        ):
            if low > high:
                raise ValueError(f"Invalid {name} range: {low} > {high}")

    def to_dict(self) -> dict:
        return {
            "min_temp_optimal": self.min_temp_optimal,
            "max_temp_optimal": self.max_temp_optimal,
            "min_precip": self.min_precip,
            "max_precip": self.max_precip,
            "min_ph": self.min_ph,
            "max_ph": self.max_ph,
            "kill_temp": self.kill_temp,
        }


@dataclass(frozen=True)
class ExportSettings:
    """Where and how the suitability raster is written."""

    description: str = EXPORT_DESCRIPTION
    scale: float = EXPORT_SCALE
    region: Tuple[float, float, float, float] = EXPORT_REGION
    crs: str = EXPORT_CRS
    destination: str = EXPORT_DESTINATION
    folder: Optional[str] = DRIVE_FOLDER
    bucket: Optional[str] = None
    asset_id: Optional[str] = None
    max_pixels: float = MAX_PIXELS


CORN_THRESHOLDS = CropThresholds(
    min_temp_optimal=CORN_TEMP_OPTIMAL_MIN,
    max_temp_optimal=CORN_TEMP_OPTIMAL_MAX,
    min_precip=CORN_PRECIP_OPTIMAL_MIN,
    max_precip=CORN_PRECIP_OPTIMAL_MAX,
    min_ph=CORN_PH_OPTIMAL_MIN,
    max_ph=CORN_PH_OPTIMAL_MAX,
    kill_temp=KILL_TEMP_BASE + KILL_TEMP_MARGIN,
)

DEFAULT_EXPORT = ExportSettings()
