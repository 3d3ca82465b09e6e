"""
Google Earth Engine authentication module.
Initializes the EE client before any dataset is touched.
"""

import ee
import os


# Service account credentials (leave unset for interactive auth)
SERVICE_ACCOUNT_KEY_FILE = os.environ.get("GEE_KEY_FILE", None)
SERVICE_ACCOUNT_EMAIL = os.environ.get("GEE_SERVICE_ACCOUNT", None)

# Cloud project linked to Earth Engine
DEFAULT_PROJECT_ID = os.environ.get("GEE_PROJECT", None)


def initialize_with_service_account(
    key_file: str,
    service_account_email: str = None,
    project_id: str = None
) -> bool:
    """
    Initialize Earth Engine with a service account key.

    Use this on servers and CI where no browser is available.

    Args:
        key_file: Path to the service account JSON key file.
        service_account_email: Account email. If None, read from the key file.
        project_id: Cloud project ID.

    Returns:
        bool: True if initialization succeeded.
    """
    try:
        credentials = ee.ServiceAccountCredentials(
            email=service_account_email,
            key_file=key_file
        )
        ee.Initialize(credentials, project=project_id)
        print("✓ Initialized with service account")
        return True
    except Exception as e:
        print(f"✗ Service account initialization failed: {e}")
        return False


def initialize_interactive(project_id: str = None) -> bool:
    """
    Authenticate with cached (or browser) credentials and initialize.

    Args:
        project_id: Cloud project ID.

    Returns:
        bool: True if initialization succeeded.
    """
    try:
        ee.Authenticate()
        ee.Initialize(project=project_id)
        print(f"✓ GEE initialized (project: {project_id or 'default'})")
        return True
    except Exception as e:
        print(f"✗ GEE initialization failed: {e}")
        print("\nTo authenticate manually, run:")
        print("  earthengine authenticate")
        return False


def check_gee_connection() -> bool:
    """Run a trivial server-side computation to confirm the session works."""
    try:
        if ee.Number(1).add(1).getInfo() == 2:
            print("✓ GEE connection verified")
            return True
        print("✗ GEE connection test returned unexpected result")
        return False
    except Exception as e:
        print(f"✗ GEE connection test failed: {e}")
        return False


def setup_gee(project_id: str = None, key_file: str = None) -> bool:
    """
    Initialize Earth Engine and verify the connection.

    Call this once at the start of the pipeline. A key file (argument or
    GEE_KEY_FILE) selects service account auth; otherwise interactive auth
    is used.

    Returns:
        bool: True if Earth Engine is ready to use.
    """
    print("Setting up Google Earth Engine...")
    print("-" * 40)

    project_id = project_id or DEFAULT_PROJECT_ID
    key_file = key_file or SERVICE_ACCOUNT_KEY_FILE

    if key_file and os.path.exists(key_file):
        print("Using service account authentication...")
        ready = initialize_with_service_account(
            key_file, SERVICE_ACCOUNT_EMAIL, project_id
        )
    else:
        ready = initialize_interactive(project_id)

    if not ready or not check_gee_connection():
        return False

    print("-" * 40)
    print("✓ GEE setup complete\n")
    return True


if __name__ == "__main__":
    setup_gee()
