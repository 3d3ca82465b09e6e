"""
Visualization module.
Static thumbnail URLs for the suitability raster and its constraint masks.
"""

import ee
from typing import Dict, List

import config


def get_thumbnail_url(
    image: ee.Image,
    roi: ee.Geometry,
    min_val: float = None,
    max_val: float = None,
    palette: List[str] = None,
    dimensions: int = None,
    format: str = "png"
) -> str:
    """
    Get a thumbnail URL for a single band image.

    Args:
        image: Image to visualize.
        roi: Region of interest.
        min_val: Minimum value for stretching. Defaults to config.VIS_PARAMS.
        max_val: Maximum value for stretching. Defaults to config.VIS_PARAMS.
        palette: Color palette. Defaults to config.VIS_PARAMS.
        dimensions: Maximum dimension in pixels.
        format: Image format ('png' keeps masked pixels transparent).

    Returns:
        str: URL to the thumbnail image.
    """
    vis_params = {
        "min": config.VIS_PARAMS["min"] if min_val is None else min_val,
        "max": config.VIS_PARAMS["max"] if max_val is None else max_val,
        "palette": palette or config.VIS_PARAMS["palette"],
        "dimensions": dimensions or config.THUMBNAIL_DIMENSIONS,
        "region": roi,
        "format": format,
    }

    return image.getThumbURL(vis_params)


def get_constraint_thumbnails(
    result,
    roi: ee.Geometry,
    dimensions: int = None
) -> Dict[str, str]:
    """
    Thumbnail URLs for the combined suitability and every constraint mask.

    Args:
        result: SuitabilityResult from suitability.build_suitability.
        roi: Region of interest.
        dimensions: Maximum dimension in pixels.

    Returns:
        dict: Layer name to thumbnail URL.
    """
    layers = {"Combined Suitability": result.suitability}
    for name, mask in result.masks.as_dict().items():
        layers[name.replace("_", " ").title()] = mask

    urls = {}
    for name, image in layers.items():
        try:
            urls[name] = get_thumbnail_url(image, roi, dimensions=dimensions)
        except ee.EEException as e:
            print(f"  Warning: Could not generate thumbnail for {name}: {e}")

    print(f"✓ Generated {len(urls)} thumbnails")
    return urls
