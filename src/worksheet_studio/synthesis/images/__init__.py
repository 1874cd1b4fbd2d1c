"""
Module: synthesis.images

Purpose:
    Image access for the synthesis pipeline: decoding raster sources and
    cropping illustration regions from the reference image.

Key Classes:
    - ImageProvider: Abstract interface for crop access
    - SourceImageProvider: Standard provider (decodes once, crops on demand)

Key Functions:
    - decode_image(): Bytes / data URL / base64 -> PIL Image
    - crop_normalized(): Crop a 0-1000 normalized region

Dependencies:
    - PIL: Image manipulation
    - worksheet_studio.core.models.bounds: NormalizedBox

Used By:
    - synthesis.layout: Image sections
    - synthesis.output: Generated illustrations and logos
    - synthesis.controller: Reference image handling
"""

from worksheet_studio.errors import ImageDecodeFailure

from .decoder import decode_image, encode_data_url, is_remote_url
from .cropper import box_to_pixels, crop_normalized
from .provider import ImageProvider, SourceImageProvider

__all__ = [
    "ImageDecodeFailure",
    "decode_image",
    "encode_data_url",
    "is_remote_url",
    "box_to_pixels",
    "crop_normalized",
    "ImageProvider",
    "SourceImageProvider",
]
