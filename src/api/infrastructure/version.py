"""Service version, read from the installed ``orderview`` distribution.

Source checkouts that were never installed fall back to the ``[project]``
table of the repository's pyproject.toml.
"""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION_NAME = "orderview"
PYPROJECT_PATH = Path(__file__).parents[3] / "pyproject.toml"


def get_version() -> str:
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        with PYPROJECT_PATH.open("rb") as f:
            return tomllib.load(f)["project"]["version"]


__version__ = get_version()
