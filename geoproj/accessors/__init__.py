"""
geoproj accessor module.

This module defines the xarray accessor that provides the .geoproj interface.
"""

from .accessor import GeoprojAccessor

__all__ = ["GeoprojAccessor"]
