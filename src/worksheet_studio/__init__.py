"""Worksheet Studio.

Subpackages:
- worksheet_studio.core: data models, response validation, derived values
- worksheet_studio.synthesis: cropping, layout, rendering, export, session control
- worksheet_studio.cli: command line entry point
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("worksheet-studio")
except PackageNotFoundError:
    # Source checkout without an install (run_studio.py)
    __version__ = "0.1.0"

__all__: list[str] = ["__version__"]
