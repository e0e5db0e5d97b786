from importlib import metadata as importlib_metadata

# Distribution name as declared in pyproject.toml
DISTRIBUTION_NAME = "mongo-unique-validation"


def get_project_name() -> str:
    return DISTRIBUTION_NAME


def get_project_version(default: str = "unknown") -> str:
    """
    Return the installed version of this distribution.

    Falls back to `default` when the package runs from a source checkout that
    was never installed (metadata is missing).
    """
    try:
        return importlib_metadata.version(DISTRIBUTION_NAME)
    except importlib_metadata.PackageNotFoundError:
        return default


__all__ = [
    "DISTRIBUTION_NAME",
    "get_project_name",
    "get_project_version",
]
