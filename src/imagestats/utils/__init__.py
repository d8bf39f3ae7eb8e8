"""Utility functions for image loading and processing.

Internal utilities for working with NIfTI images and file I/O.
"""

from imagestats.utils.image import _image_data, _load_nifti

__all__ = ["_image_data", "_load_nifti"]
