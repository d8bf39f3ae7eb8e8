"""Image loading helpers."""

from __future__ import annotations

from pathlib import Path

import nibabel as nib
import numpy as np
from nibabel.spatialimages import SpatialImage


def _load_nifti(img: SpatialImage | str | Path) -> SpatialImage:
    """Return a loaded image, reading it from disk when given a path."""
    if isinstance(img, (str, Path)):
        return nib.load(str(img))
    return img


def _image_data(img: SpatialImage) -> np.ndarray:
    """Return the voxel data of an image in its stored sample type.

    Unlike ``get_fdata``, integer images keep their integer type. Scaled
    images (non-trivial ``scl_slope``/``scl_inter``) come back as floats.
    """
    return np.asanyarray(img.dataobj)
