"""
geoproj accessor implementation.

This module implements the xarray accessor that provides the .geoproj interface.
"""

import logging
from typing import Optional, Union

import numpy as np
import xarray as xr

from ..pj import PJ, Direction

logger = logging.getLogger(__name__)


@xr.register_dataset_accessor("geoproj")
@xr.register_dataarray_accessor("geoproj")
class GeoprojAccessor:
    """
    xarray accessor for geoproj functionality.

    This accessor provides methods for:
    - Transforming coordinate variables with a PJ
    """

    def __init__(self, xarray_obj: Union[xr.Dataset, xr.DataArray]):
        self._obj = xarray_obj
        self._name = "geoproj"

    def transform(
        self,
        pj: PJ,
        x: str,
        y: str,
        z: Optional[str] = None,
        direction: Direction = Direction.FWD,
    ) -> Union[xr.Dataset, xr.DataArray]:
        """
        Transform coordinate variables of the current dataset/dataarray.

        Parameters
        ----------
        pj : PJ
            The transformation to apply
        x, y : str
            Names of the coordinates holding the first and second component,
            in the axis order ``pj`` expects
        z : str, optional
            Name of the coordinate holding the third component
        direction : Direction, optional
            Direction of the transformation (default: Direction.FWD)

        Returns
        -------
        xr.Dataset or xr.DataArray
            A copy whose ``x``, ``y`` (and ``z``) coordinates hold the
            transformed values; data variables and attributes are unchanged

        Raises
        ------
        ValueError
            If the coordinates do not share the same dimensions
        TransformError
            If any coordinate cannot be transformed
        """
        if not isinstance(pj, PJ):
            raise TypeError(f"pj must be a geoproj PJ, got {type(pj)}")

        names = [name for name in (x, y, z) if name is not None]
        for name in names:
            if not isinstance(name, str):
                raise TypeError(f"coordinate names must be str, got {type(name)}")
            if name not in self._obj.coords:
                raise ValueError(f"'{name}' is not a coordinate of this object")

        dims = self._obj.coords[x].dims
        for name in names[1:]:
            if self._obj.coords[name].dims != dims:
                raise ValueError(
                    f"coordinates {names} must share the same dimensions, "
                    f"got {[self._obj.coords[n].dims for n in names]}"
                )

        # Private float64 copies; the source object is left untouched.
        values = {
            name: np.array(self._obj.coords[name].values, dtype=np.float64).reshape(-1)
            for name in names
        }
        n = values[x].size
        if n == 0:
            return self._obj.copy()

        itemsize = values[x].itemsize
        z_values = values.get(z) if z is not None else None
        pj.trans_generic(
            direction,
            values[x], itemsize, n,
            values[y], itemsize, n,
            z_values, itemsize if z_values is not None else 0, n if z_values is not None else 0,
        )
        logger.debug("Transformed %d coordinates of %s", n, names)

        shape = self._obj.coords[x].shape
        new_coords = {
            name: self._obj.coords[name].copy(data=values[name].reshape(shape))
            for name in names
        }
        return self._obj.assign_coords(new_coords)
