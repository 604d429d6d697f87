"""Version information for the Pincho client."""

from importlib.metadata import PackageNotFoundError, version

_VERSION: str | None = None


def get_version() -> str:
    """
    Get the installed package version.

    Returns:
        Version string (e.g., "1.0.0"), or "unknown" when not installed
    """
    global _VERSION

    # Cache the version after first read
    if _VERSION is not None:
        return _VERSION

    try:
        _VERSION = version("pincho")
    except PackageNotFoundError:
        _VERSION = "unknown"
    return _VERSION


def user_agent() -> str:
    """Client identifier sent with every request."""
    return f"pincho-python/{get_version()}"
