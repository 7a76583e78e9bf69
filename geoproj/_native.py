"""
Low-level access to the PROJ shared library.

This module locates and loads PROJ, declares the signature of every foreign
function geoproj calls and converts native strings and string lists into
Python objects at the boundary. Nothing outside geoproj should import it.
"""

import ctypes
import ctypes.util
import logging
import os
import threading
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

import pyproj
from pyproj.datadir import get_data_dir
from pyproj.exceptions import DataDirError

from geoproj.config import get_settings
from geoproj.errors import LibraryNotFoundError

logger = logging.getLogger(__name__)

c_void_p = ctypes.c_void_p
c_char_p = ctypes.c_char_p
c_int = ctypes.c_int
c_double = ctypes.c_double
c_size_t = ctypes.c_size_t


class PJ_COORD(ctypes.Structure):
    # Union of 4 doubles on the C side; every member shares this layout.
    _fields_ = [
        ("x", c_double),
        ("y", c_double),
        ("z", c_double),
        ("t", c_double),
    ]


class PJ_PROJ_INFO(ctypes.Structure):
    _fields_ = [
        ("id", c_char_p),
        ("description", c_char_p),
        ("definition", c_char_p),
        ("has_inverse", c_int),
        ("accuracy", c_double),
    ]


class PJ_INFO(ctypes.Structure):
    _fields_ = [
        ("major", c_int),
        ("minor", c_int),
        ("patch", c_int),
        ("release", c_char_p),
        ("version", c_char_p),
        ("searchpath", c_char_p),
        ("paths", ctypes.POINTER(c_char_p)),
        ("path_count", c_size_t),
    ]


c_double_p = ctypes.POINTER(c_double)
PJ_COORD_p = ctypes.POINTER(PJ_COORD)

# name: (argtypes, restype). Pointers to PJ_CONTEXT, PJ, PJ_AREA, PJ_OBJ_LIST
# and PROJ_STRING_LIST are all opaque and declared as c_void_p.
_SIGNATURES = {
    "proj_info": ([], PJ_INFO),
    "proj_context_create": ([], c_void_p),
    "proj_context_destroy": ([c_void_p], c_void_p),
    "proj_log_level": ([c_void_p, c_int], c_int),
    "proj_context_set_search_paths": ([c_void_p, c_int, ctypes.POINTER(c_char_p)], None),
    "proj_context_errno": ([c_void_p], c_int),
    "proj_context_errno_string": ([c_void_p, c_int], c_char_p),
    "proj_errno": ([c_void_p], c_int),
    "proj_errno_reset": ([c_void_p], c_int),
    "proj_errno_restore": ([c_void_p, c_int], c_int),
    "proj_create": ([c_void_p, c_char_p], c_void_p),
    "proj_create_argv": ([c_void_p, c_int, ctypes.POINTER(c_char_p)], c_void_p),
    "proj_create_crs_to_crs": ([c_void_p, c_char_p, c_char_p, c_void_p], c_void_p),
    "proj_create_crs_to_crs_from_pj": (
        [c_void_p, c_void_p, c_void_p, c_void_p, ctypes.POINTER(c_char_p)],
        c_void_p,
    ),
    "proj_create_compound_crs": ([c_void_p, c_char_p, c_void_p, c_void_p], c_void_p),
    "proj_destroy": ([c_void_p], c_void_p),
    "proj_area_create": ([], c_void_p),
    "proj_area_set_bbox": ([c_void_p, c_double, c_double, c_double, c_double], None),
    "proj_area_set_name": ([c_void_p, c_char_p], None),
    "proj_area_destroy": ([c_void_p], None),
    "proj_get_authorities_from_database": ([c_void_p], c_void_p),
    "proj_get_codes_from_database": ([c_void_p, c_char_p, c_int, c_int], c_void_p),
    "proj_string_list_destroy": ([c_void_p], None),
    "proj_normalize_for_visualization": ([c_void_p, c_void_p], c_void_p),
    "proj_trans_get_last_used_operation": ([c_void_p], c_void_p),
    "proj_pj_info": ([c_void_p], PJ_PROJ_INFO),
    "proj_is_crs": ([c_void_p], c_int),
    "proj_get_type": ([c_void_p], c_int),
    "proj_get_id_auth_name": ([c_void_p, c_int], c_char_p),
    "proj_get_id_code": ([c_void_p, c_int], c_char_p),
    "proj_get_area_of_use": (
        [c_void_p, c_void_p, c_double_p, c_double_p, c_double_p, c_double_p,
         ctypes.POINTER(c_char_p)],
        c_int,
    ),
    "proj_as_wkt": ([c_void_p, c_void_p, c_int, ctypes.POINTER(c_char_p)], c_char_p),
    "proj_as_projjson": ([c_void_p, c_void_p, ctypes.POINTER(c_char_p)], c_char_p),
    "proj_identify": (
        [c_void_p, c_void_p, c_char_p, ctypes.POINTER(c_char_p),
         ctypes.POINTER(ctypes.POINTER(c_int))],
        c_void_p,
    ),
    "proj_list_get_count": ([c_void_p], c_int),
    "proj_list_get": ([c_void_p, c_void_p, c_int], c_void_p),
    "proj_list_destroy": ([c_void_p], None),
    "proj_int_list_destroy": ([ctypes.POINTER(c_int)], None),
    "proj_crs_get_sub_crs": ([c_void_p, c_void_p, c_int], c_void_p),
    "proj_trans": ([c_void_p, c_int, PJ_COORD], PJ_COORD),
    "proj_trans_array": ([c_void_p, c_int, c_size_t, PJ_COORD_p], c_int),
    "proj_trans_bounds": (
        [c_void_p, c_void_p, c_int, c_double, c_double, c_double, c_double,
         c_double_p, c_double_p, c_double_p, c_double_p, c_int],
        c_int,
    ),
    "proj_trans_generic": (
        [c_void_p, c_int,
         c_double_p, c_size_t, c_size_t,
         c_double_p, c_size_t, c_size_t,
         c_double_p, c_size_t, c_size_t,
         c_double_p, c_size_t, c_size_t],
        c_size_t,
    ),
    "proj_geod": ([c_void_p, PJ_COORD, PJ_COORD], PJ_COORD),
    "proj_lp_dist": ([c_void_p, PJ_COORD, PJ_COORD], c_double),
    "proj_lpz_dist": ([c_void_p, PJ_COORD, PJ_COORD], c_double),
}

# Symbols missing from older PROJ releases; calls needing them fail when used.
_OPTIONAL = {"proj_area_set_name", "proj_trans_get_last_used_operation"}

_LIBRARY_PATTERNS = ("libproj*.so*", "libproj*.dylib", "proj*.dll", "libproj*.dll")

_lib: Optional[ctypes.CDLL] = None
_lib_lock = threading.Lock()


def _bundled_library_candidates() -> Iterator[Path]:
    """Yield PROJ libraries shipped inside the installed pyproj wheel."""
    package_dir = Path(pyproj.__file__).resolve().parent
    for directory in (
        package_dir.parent / "pyproj.libs",
        package_dir / ".dylibs",
        package_dir / "proj_dir" / "lib",
    ):
        if not directory.is_dir():
            continue
        for pattern in _LIBRARY_PATTERNS:
            yield from sorted(directory.glob(pattern))


def _library_candidates() -> List[str]:
    settings = get_settings()
    if settings.library_path:
        return [settings.library_path]
    candidates = [str(path) for path in _bundled_library_candidates()]
    system_library = ctypes.util.find_library("proj")
    if system_library:
        candidates.append(system_library)
    return candidates


def _open_library(candidates: Sequence[str]) -> ctypes.CDLL:
    failures = []
    for candidate in candidates:
        if os.name == "nt" and os.path.isabs(candidate):
            os.add_dll_directory(os.path.dirname(candidate))
        try:
            lib = ctypes.CDLL(candidate)
        except OSError as err:
            failures.append(f"{candidate}: {err}")
            continue
        if not hasattr(lib, "proj_context_create"):
            failures.append(f"{candidate}: not a PROJ library")
            continue
        logger.debug("Loaded PROJ from %s", candidate)
        return lib
    detail = "; ".join(failures) if failures else "no candidates found"
    raise LibraryNotFoundError(
        "Could not load the PROJ shared library "
        f"({detail}). Install pyproj or set GEOPROJ_LIBRARY_PATH."
    )


def _setup_function_signatures(lib: ctypes.CDLL) -> None:
    for name, (argtypes, restype) in _SIGNATURES.items():
        try:
            function = getattr(lib, name)
        except AttributeError:
            if name in _OPTIONAL:
                logger.debug("PROJ library lacks optional symbol %s", name)
                continue
            raise LibraryNotFoundError(f"PROJ library lacks required symbol {name}")
        function.argtypes = argtypes
        function.restype = restype


def get_library() -> ctypes.CDLL:
    """Return the loaded PROJ library, loading it on first use."""
    global _lib
    if _lib is None:
        with _lib_lock:
            if _lib is None:
                lib = _open_library(_library_candidates())
                _setup_function_signatures(lib)
                # Silence the default context; each Context sets its own level.
                lib.proj_log_level(None, 0)
                info = lib.proj_info()
                logger.debug("Using PROJ %s", decode(info.release))
                _lib = lib
    return _lib


def has_symbol(name: str) -> bool:
    return hasattr(get_library(), name)


def proj_version() -> Tuple[int, int, int]:
    """Return the (major, minor, patch) version of the loaded PROJ library."""
    info = get_library().proj_info()
    return info.major, info.minor, info.patch


def default_search_paths() -> List[str]:
    """Return the data directories new contexts search for proj.db and grids."""
    data_dir = get_settings().data_dir
    if data_dir:
        return [data_dir]
    try:
        return [get_data_dir()]
    except DataDirError:
        logger.debug("pyproj data directory not found; using PROJ's built-in search paths")
        return []


def decode(value: Optional[bytes]) -> str:
    """Copy a native ``const char *`` into a str; NULL becomes an empty string."""
    if value is None:
        return ""
    return value.decode("utf-8")


def encode(value: str) -> bytes:
    return value.encode("utf-8")


def string_array(values: Sequence[str], null_terminated: bool = False):
    """
    Build a native ``char *[]`` from ``values``.

    The returned ctypes array keeps references to the encoded strings, which
    stay alive for as long as the array does. Returns None for an empty,
    non-terminated sequence.
    """
    encoded = [encode(value) for value in values]
    if null_terminated:
        encoded.append(None)
    if not encoded:
        return None
    return (c_char_p * len(encoded))(*encoded)


def string_list_to_python(string_list: Optional[int]) -> List[str]:
    """Decode a NULL-terminated native ``char **`` into a list of str."""
    if not string_list:
        return []
    array = ctypes.cast(string_list, ctypes.POINTER(c_char_p))
    result = []
    index = 0
    while array[index] is not None:
        result.append(decode(array[index]))
        index += 1
    return result
