"""
geoproj: safe Python bindings to the PROJ coordinate transformation library.

This library provides:
- Contexts and PJ handles whose native resources are released exactly once
- Forward/inverse transformation of single coordinates, arrays, flat
  strided buffers and bounding boxes
- CRS introspection (type, identifiers, area of use, WKT and PROJJSON)
- CRS identification against the PROJ database

Module level functions such as ``geoproj.new`` work on a process-wide default
context. Importing the package also registers the ``.geoproj`` xarray accessor.
"""

__version__ = "0.1.0"

from ._native import proj_version  # noqa: F401
from .coord import Area, Bounds, Coord, float64_lists_to_coords  # noqa: F401
from .errors import (  # noqa: F401
    CreationError,
    GeoprojError,
    HandleDestroyedError,
    IncompatibleExportError,
    InfoQueryError,
    LibraryNotFoundError,
    ProjError,
    SubCRSLimitError,
    TransformError,
    UnexpectedTypeError,
)
from .pj import (  # noqa: F401
    MAX_SUB_CRS,
    PJ,
    SRID,
    AreaOfUse,
    Direction,
    FullPJInfo,
    IdentifyMatch,
    IdentifyMatchInfo,
    PJInfo,
    PJType,
    WKTType,
)
from .context import (  # noqa: F401
    Context,
    LogLevel,
    create_compound_crs,
    get_all_crs_codes,
    get_authorities_from_database,
    get_default_context,
    lock_contexts,
    new,
    new_crs_to_crs,
    new_crs_to_crs_from_pj,
    new_from_args,
    set_log_level,
    set_search_paths,
)

# Register the accessor automatically when the package is imported
from .accessors import GeoprojAccessor  # noqa: F401, E402

_VERSION_FIELDS = {"VERSION_MAJOR": 0, "VERSION_MINOR": 1, "VERSION_PATCH": 2}


def __getattr__(name):
    # The PROJ library is only loaded when its version is first asked for.
    if name in _VERSION_FIELDS:
        return proj_version()[_VERSION_FIELDS[name]]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


# Public API
__all__ = [
    "Area",
    "AreaOfUse",
    "Bounds",
    "Context",
    "Coord",
    "CreationError",
    "Direction",
    "FullPJInfo",
    "GeoprojAccessor",
    "GeoprojError",
    "HandleDestroyedError",
    "IdentifyMatch",
    "IdentifyMatchInfo",
    "IncompatibleExportError",
    "InfoQueryError",
    "LibraryNotFoundError",
    "LogLevel",
    "MAX_SUB_CRS",
    "PJ",
    "PJInfo",
    "PJType",
    "ProjError",
    "SRID",
    "SubCRSLimitError",
    "TransformError",
    "UnexpectedTypeError",
    "VERSION_MAJOR",
    "VERSION_MINOR",
    "VERSION_PATCH",
    "WKTType",
    "create_compound_crs",
    "float64_lists_to_coords",
    "get_all_crs_codes",
    "get_authorities_from_database",
    "get_default_context",
    "lock_contexts",
    "new",
    "new_crs_to_crs",
    "new_crs_to_crs_from_pj",
    "new_from_args",
    "proj_version",
    "set_log_level",
    "set_search_paths",
]
