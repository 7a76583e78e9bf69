"""
Test fixtures for geoproj.

This module contains shared fixtures (contexts, common transformations and
reference coordinates) used throughout the test suite.
"""

import numpy as np
import pytest
import xarray as xr

from geoproj import Context, Coord

# EPSG:4326 axis order is latitude, longitude.
NEW_YORK = Coord(40.712778, -74.006111, 10.0, 0.0)
NEW_YORK_WEB_MERCATOR = Coord(-8238322.592110482, 4970068.348185822, 10.0, 0.0)
PARIS = Coord(48.856613, 2.352222, 35.0, 0.0)
SYDNEY = Coord(-33.868820, 151.209296, 58.0, 0.0)


@pytest.fixture
def context():
    """Create a context that is destroyed after the test."""
    ctx = Context()
    yield ctx
    ctx.destroy()


@pytest.fixture
def other_context():
    """A second, independent context."""
    ctx = Context()
    yield ctx
    ctx.destroy()


@pytest.fixture
def web_mercator(context):
    """EPSG:4326 to EPSG:3857, with the authority axis order (lat, lon)."""
    return context.new_crs_to_crs("EPSG:4326", "EPSG:3857")


@pytest.fixture
def web_mercator_lonlat(web_mercator):
    """EPSG:4326 to EPSG:3857 taking (lon, lat) input."""
    return web_mercator.normalize_for_visualization()


@pytest.fixture
def city_coords():
    """Three cities as a list of Coords (lat, lon, height, m)."""
    return [NEW_YORK, PARIS, SYDNEY]


@pytest.fixture
def station_dataset():
    """Create a small station dataset with lon/lat coordinates."""
    lons = np.array([NEW_YORK.y, PARIS.y, SYDNEY.y])
    lats = np.array([NEW_YORK.x, PARIS.x, SYDNEY.x])
    heights = np.array([NEW_YORK.z, PARIS.z, SYDNEY.z])

    ds = xr.Dataset(
        {'temperature': (['station'], np.array([12.5, 15.0, 22.1]))},
        coords={
            'lon': (['station'], lons),
            'lat': (['station'], lats),
            'height': (['station'], heights),
            'station': ['new_york', 'paris', 'sydney'],
        },
    )
    ds.coords['lon'].attrs['units'] = 'degrees_east'

    return ds
