"""
Export module.
Handles exporting the suitability raster to Google Drive, Cloud Storage,
or as a GEE asset.
"""

import ee
from typing import Sequence
import time

import config


class ExportError(Exception):
    """The suitability raster could not be exported."""

    stage = "export"


def validate_region(region: Sequence[float]) -> None:
    """
    Check a (west, south, east, north) rectangle in degrees.

    Raises:
        ExportError: If the rectangle is malformed, empty or out of range.
    """
    try:
        west, south, east, north = (float(v) for v in region)
    except (TypeError, ValueError) as e:
        raise ExportError(
            f"Region must be (west, south, east, north), got {region!r}"
        ) from e

    if not (-180 <= west <= 180 and -180 <= east <= 180):
        raise ExportError(f"Longitude out of range in region {region!r}")
    if not (-90 <= south <= 90 and -90 <= north <= 90):
        raise ExportError(f"Latitude out of range in region {region!r}")
    if west >= east or south >= north:
        raise ExportError(f"Region has no area: {region!r}")


def validate_crs(crs: str) -> None:
    """
    Check that crs is an "AUTHORITY:CODE" string such as "EPSG:3857".

    Raises:
        ExportError: If the CRS is not recognised.
    """
    if not isinstance(crs, str) or not config.CRS_PATTERN.match(crs.upper()):
        raise ExportError(f"Invalid CRS: {crs!r}")


def export_to_drive(
    image: ee.Image,
    roi: ee.Geometry,
    description: str,
    folder: str = None,
    scale: float = None,
    crs: str = None,
    max_pixels: float = None
) -> ee.batch.Task:
    """
    Create an export task to Google Drive.

    Args:
        image: Image to export.
        roi: Export region.
        description: Task description (also used as filename).
        folder: Drive folder name. Defaults to config.DRIVE_FOLDER.
        scale: Export scale in meters. Defaults to config.EXPORT_SCALE.
        crs: Coordinate reference system. Defaults to config.EXPORT_CRS.
        max_pixels: Pixel limit. Defaults to config.MAX_PIXELS.

    Returns:
        ee.batch.Task: The export task object (not started).
    """
    params = dict(
        image=image,
        description=description,
        region=roi,
        scale=scale or config.EXPORT_SCALE,
        crs=crs or config.EXPORT_CRS,
        maxPixels=max_pixels or config.MAX_PIXELS,
        fileFormat="GeoTIFF",
    )
    folder = folder or config.DRIVE_FOLDER
    if folder:
        params["folder"] = folder

    return ee.batch.Export.image.toDrive(**params)


def export_to_cloud_storage(
    image: ee.Image,
    roi: ee.Geometry,
    description: str,
    bucket: str,
    file_prefix: str = None,
    scale: float = None,
    crs: str = None,
    max_pixels: float = None
) -> ee.batch.Task:
    """
    Create an export task to Google Cloud Storage.

    Args:
        image: Image to export.
        roi: Export region.
        description: Task description.
        bucket: GCS bucket name.
        file_prefix: Path prefix within bucket. Defaults to description.
        scale: Export scale in meters.
        crs: Coordinate reference system.
        max_pixels: Pixel limit.

    Returns:
        ee.batch.Task: The export task object (not started).
    """
    return ee.batch.Export.image.toCloudStorage(
        image=image,
        description=description,
        bucket=bucket,
        fileNamePrefix=file_prefix or description,
        region=roi,
        scale=scale or config.EXPORT_SCALE,
        crs=crs or config.EXPORT_CRS,
        maxPixels=max_pixels or config.MAX_PIXELS,
        fileFormat="GeoTIFF",
    )


def export_as_asset(
    image: ee.Image,
    roi: ee.Geometry,
    asset_id: str,
    description: str = None,
    scale: float = None,
    crs: str = None,
    max_pixels: float = None
) -> ee.batch.Task:
    """
    Create an export task writing an Earth Engine asset.

    Args:
        image: Image to export.
        roi: Export region.
        asset_id: Full asset ID (e.g., 'users/username/corn_suitability').
        description: Task description. Defaults to the asset name.

    Returns:
        ee.batch.Task: The export task object (not started).
    """
    return ee.batch.Export.image.toAsset(
        image=image,
        description=description or asset_id.split("/")[-1],
        assetId=asset_id,
        region=roi,
        scale=scale or config.EXPORT_SCALE,
        crs=crs or config.EXPORT_CRS,
        maxPixels=max_pixels or config.MAX_PIXELS,
    )


def _destination_label(settings: config.ExportSettings) -> str:
    if settings.destination == "drive":
        return f"Google Drive/{settings.folder or ''}"
    if settings.destination == "cloud":
        return f"gs://{settings.bucket}/{settings.description}"
    return settings.asset_id


def export_suitability(
    image: ee.Image,
    settings: config.ExportSettings = None,
    start_task: bool = True
) -> ee.batch.Task:
    """
    Export the suitability raster.

    Args:
        image: Suitability image.
        settings: Destination, scale, region and CRS.
                  Defaults to config.DEFAULT_EXPORT.
        start_task: If True, starts the export task immediately.

    Returns:
        ee.batch.Task: The export task object.

    Raises:
        ExportError: If the settings are invalid or Earth Engine rejects
                     the task.
    """
    settings = settings or config.DEFAULT_EXPORT

    validate_region(settings.region)
    validate_crs(settings.crs)
    if not settings.description:
        raise ExportError("Export description must not be empty")
    if settings.scale is None or settings.scale <= 0:
        raise ExportError(f"Export scale must be positive, got {settings.scale}")

    common = dict(
        scale=settings.scale,
        crs=settings.crs,
        max_pixels=settings.max_pixels,
    )

    try:
        roi = ee.Geometry.Rectangle(list(settings.region))

        if settings.destination == "drive":
            task = export_to_drive(
                image, roi, settings.description,
                folder=settings.folder, **common
            )
        elif settings.destination == "cloud":
            if not settings.bucket:
                raise ExportError("Cloud Storage export requires a bucket")
            task = export_to_cloud_storage(
                image, roi, settings.description,
                bucket=settings.bucket, **common
            )
        elif settings.destination == "asset":
            if not settings.asset_id:
                raise ExportError("Asset export requires an asset_id")
            task = export_as_asset(
                image, roi, settings.asset_id,
                description=settings.description, **common
            )
        else:
            raise ExportError(
                f"Unknown export destination: {settings.destination!r}"
            )

        if start_task:
            task.start()
    except ee.EEException as e:
        raise ExportError(f"Export '{settings.description}' failed: {e}") from e

    if start_task:
        print(f"✓ Started export task: {settings.description}")
        print(f"  Destination: {_destination_label(settings)}")
        print(f"  Scale: {settings.scale}m, CRS: {settings.crs}")
    else:
        print(f"✓ Created export task: {settings.description} (not started)")

    return task


def _task_status(task: ee.batch.Task) -> dict:
    try:
        return task.status()
    except ee.EEException as e:
        raise ExportError(f"Could not read export task status: {e}") from e


def check_task_status(task: ee.batch.Task) -> dict:
    """
    Check status of an export task.

    Args:
        task: Export task to check.

    Returns:
        dict: Status information.

    Raises:
        ExportError: If Earth Engine cannot report the task status.
    """
    status = _task_status(task)
    return {
        "id": status.get("id"),
        "state": status.get("state"),
        "description": status.get("description"),
        "creation_time": status.get("creation_timestamp_ms"),
        "start_time": status.get("start_timestamp_ms"),
        "update_time": status.get("update_timestamp_ms"),
        "error_message": status.get("error_message"),
    }


def wait_for_task(
    task: ee.batch.Task,
    timeout_minutes: int = 30,
    poll_interval: int = 30
) -> bool:
    """
    Wait for an export task to complete.

    Args:
        task: Export task to wait for.
        timeout_minutes: Maximum wait time in minutes.
        poll_interval: Seconds between status checks.

    Returns:
        bool: True if completed successfully, False otherwise.
    """
    start_time = time.time()
    timeout_seconds = timeout_minutes * 60

    while True:
        status = _task_status(task)
        state = status["state"]

        if state in ("COMPLETED", "SUCCEEDED"):
            elapsed = (time.time() - start_time) / 60
            print(f"✓ Task completed in {elapsed:.1f} minutes")
            return True

        if state == "FAILED":
            print(f"✗ Task failed: {status.get('error_message', 'Unknown error')}")
            return False

        if state in ("CANCELLED", "CANCEL_REQUESTED"):
            print("✗ Task was cancelled")
            return False

        elapsed = time.time() - start_time
        if elapsed > timeout_seconds:
            print(f"✗ Timeout after {timeout_minutes} minutes")
            return False

        remaining = (timeout_seconds - elapsed) / 60
        print(f"  Status: {state} (waiting... {remaining:.0f} min remaining)")
        time.sleep(poll_interval)
