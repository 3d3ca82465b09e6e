import config
from retrieval import DataUnavailableError
from export import ExportError, check_task_status
from main import run_pipeline
from suitability import SummaryError


class AnalysisError(Exception):
    def __init__(self, stage: str, message: str):
        super().__init__(message)
        self.stage = stage


def analyze_suitability(
    region: list = None,
    scale: float = None,
    crs: str = None,
    description: str = None,
    destination: str = None,
    summary: bool = False,
    thumbnails: bool = False,
    start_export: bool = True
) -> dict:
    """Run the pipeline with request overrides and return a JSON-ready dict."""
    defaults = config.DEFAULT_EXPORT
    try:
        settings = config.ExportSettings(
            description=description or defaults.description,
            scale=scale or defaults.scale,
            region=tuple(region) if region else defaults.region,
            crs=crs or defaults.crs,
            destination=destination or defaults.destination,
            folder=defaults.folder,
            bucket=defaults.bucket,
            asset_id=defaults.asset_id,
            max_pixels=defaults.max_pixels,
        )
        results = run_pipeline(
            config.CORN_THRESHOLDS,
            settings,
            start_export=start_export,
            summarize=summary,
            thumbnails=thumbnails,
        )
        task = results["export_task"]
        task_status = check_task_status(task) if start_export else None
    except (DataUnavailableError, ExportError, SummaryError) as e:
        raise AnalysisError(e.stage, str(e)) from e

    output = {
        "thresholds": config.CORN_THRESHOLDS.to_dict(),
        "export": {
            "description": settings.description,
            "destination": settings.destination,
            "scale": settings.scale,
            "region": list(settings.region),
            "crs": settings.crs,
            "started": start_export,
            "task": task_status,
        },
    }
    if "summary" in results:
        output["summary"] = results["summary"]
    if "thumbnails" in results:
        output["thumbnails"] = results["thumbnails"]

    return output
