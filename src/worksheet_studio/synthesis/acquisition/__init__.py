"""
Module: synthesis.acquisition

Purpose:
    Reference image acquisition from URLs and local files.

Key Functions:
    - fetch_image(): Download via requests
    - load_image_file(): Read from disk

Used By:
    - synthesis.controller
    - worksheet_studio.cli
"""

from .fetch import ReferenceImage, fetch_image, load_image_file

__all__ = ["ReferenceImage", "fetch_image", "load_image_file"]
