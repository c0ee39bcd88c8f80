"""
journeykit version lookup
"""

from importlib.metadata import PackageNotFoundError, version

PACKAGE_NAME = "journeykit"


def get_version() -> str:
    """Installed journeykit version, or "unknown" when running from an uninstalled checkout"""
    try:
        return version(PACKAGE_NAME)
    except PackageNotFoundError:
        return "unknown"
