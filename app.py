from flask import Flask, request, jsonify
from flask_cors import CORS
from flasgger import Swagger

import config
from analysis import analyze_suitability, AnalysisError
from auth import setup_gee

# Initialize Flask app
app = Flask(__name__)
CORS(app)

# Swagger configuration
swagger_config = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec",
            "route": "/apispec.json",
            "rule_filter": lambda rule: True,
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/docs"
}

swagger_template = {
    "info": {
        "title": "Corn Suitability API",
        "description": "Corn suitability from PRISM climate normals and SoilGrids soil pH",
        "version": "1.0.0"
    }
}

swagger = Swagger(app, config=swagger_config, template=swagger_template)

# GEE is initialized on the first request that needs it
gee_connected = False

DESTINATIONS = ("drive", "cloud", "asset")


def ensure_gee() -> bool:
    global gee_connected
    if not gee_connected:
        try:
            gee_connected = setup_gee()
        except Exception as e:
            print(f"✗ Error initializing GEE: {e}")
            gee_connected = False
    return gee_connected


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_suitability_request(data: dict) -> list:
    """Return a list of validation error messages (empty if valid)."""
    if not isinstance(data, dict):
        return ["Request body must be a JSON object"]

    errors = []

    region = data.get("region")
    if region is not None:
        if (not isinstance(region, list) or len(region) != 4
                or not all(_is_number(v) for v in region)):
            errors.append("region must be [west, south, east, north]")
        else:
            west, south, east, north = region
            if not (-180 <= west < east <= 180):
                errors.append("region longitudes must satisfy -180 <= west < east <= 180")
            if not (-90 <= south < north <= 90):
                errors.append("region latitudes must satisfy -90 <= south < north <= 90")

    scale = data.get("scale")
    if scale is not None and (not _is_number(scale) or scale <= 0):
        errors.append("scale must be a positive number")

    crs = data.get("crs")
    if crs is not None and (not isinstance(crs, str)
                            or not config.CRS_PATTERN.match(crs.upper())):
        errors.append("crs must look like 'EPSG:3857'")

    description = data.get("description")
    if description is not None and (not isinstance(description, str)
                                    or not description.strip()):
        errors.append("description must be a non-empty string")

    destination = data.get("destination")
    if destination is not None and destination not in DESTINATIONS:
        errors.append(f"destination must be one of {', '.join(DESTINATIONS)}")

    for flag in ("summary", "thumbnails", "start_export"):
        if flag in data and not isinstance(data[flag], bool):
            errors.append(f"{flag} must be a boolean")

    return errors


@app.route("/api/health", methods=["GET"])
def health():
    """
    Health check endpoint
    ---
    tags:
      - Health
    responses:
      200:
        description: Server status
        schema:
          type: object
          properties:
            status:
              type: string
              example: healthy
            gee_connected:
              type: boolean
              example: true
    """
    return jsonify({
        "status": "healthy",
        "gee_connected": gee_connected
    }), 200


@app.route("/api/thresholds", methods=["GET"])
def thresholds():
    """
    Crop thresholds used by the analysis
    ---
    tags:
      - Suitability
    responses:
      200:
        description: Corn thresholds (inclusive ranges)
    """
    return jsonify({
        "success": True,
        "crop": "corn",
        "thresholds": config.CORN_THRESHOLDS.to_dict(),
        "growing_season_months": list(config.GROWING_SEASON_MONTHS),
        "kill_temp_month": config.KILL_TEMP_MONTH
    }), 200


@app.route("/api/suitability", methods=["POST"])
def suitability_endpoint():
    """
    Compute corn suitability and export it
    ---
    tags:
      - Suitability
    parameters:
      - name: body
        in: body
        required: false
        schema:
          type: object
          properties:
            region:
              type: array
              items:
                type: number
              description: Export rectangle [west, south, east, north]
              example: [-77, 39, -75, 41]
            scale:
              type: number
              description: Export resolution in meters
              example: 250
            crs:
              type: string
              example: "EPSG:3857"
            description:
              type: string
              example: "CornSuitabilityGEE"
            destination:
              type: string
              enum: [drive, cloud, asset]
            summary:
              type: boolean
              description: Include suitable pixel count and area
            thumbnails:
              type: boolean
              description: Include thumbnail URLs
            start_export:
              type: boolean
              description: Start the export task (default true)
    responses:
      200:
        description: Export started
      400:
        description: Validation error
      422:
        description: Pipeline failed (data unavailable or export error)
      503:
        description: GEE not connected
    """
    data = request.get_json(silent=True)
    if data is None:
        if request.get_data():
            return jsonify({
                "success": False,
                "error": "Invalid JSON in request body"
            }), 400
        data = {}

    validation_errors = validate_suitability_request(data)
    if validation_errors:
        return jsonify({
            "success": False,
            "error": "Validation failed",
            "details": validation_errors
        }), 400

    if not ensure_gee():
        return jsonify({
            "success": False,
            "error": "Google Earth Engine is not connected"
        }), 503

    try:
        results = analyze_suitability(
            region=data.get("region"),
            scale=data.get("scale"),
            crs=data.get("crs"),
            description=data.get("description"),
            destination=data.get("destination"),
            summary=data.get("summary", False),
            thumbnails=data.get("thumbnails", False),
            start_export=data.get("start_export", True)
        )

        return jsonify({
            "success": True,
            "data": results
        }), 200

    except AnalysisError as e:
        return jsonify({
            "success": False,
            "error": "Analysis failed",
            "stage": e.stage,
            "message": str(e)
        }), 422


@app.errorhandler(404)
def not_found(error):
    return jsonify({
        "success": False,
        "error": "Not found",
        "message": "The requested endpoint does not exist"
    }), 404


@app.errorhandler(500)
def internal_error(error):
    return jsonify({
        "success": False,
        "error": "Internal server error",
        "message": "An unexpected error occurred"
    }), 500


if __name__ == "__main__":
    ensure_gee()
    app.run(debug=True, host="0.0.0.0", port=5000)
