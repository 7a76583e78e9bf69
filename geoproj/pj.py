"""
PJ handles: projections, transformations and other PROJ objects.

A PJ is always created by a Context and stays bound to it. Every native call
made through a PJ holds the owning context's lock and, where PROJ reports
failure through its error number, resets the error number before the call
and restores the previous value afterwards.
"""

import ctypes
import logging
import weakref
from collections.abc import MutableSequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple, Union

import numpy as np

from geoproj._native import PJ_COORD, PJ_COORD_p, c_double_p, decode, get_library, has_symbol
from geoproj.coord import Bounds, Coord, float64_lists_to_coords
from geoproj.errors import (
    GeoprojError,
    HandleDestroyedError,
    IncompatibleExportError,
    InfoQueryError,
    ProjError,
    SubCRSLimitError,
    TransformError,
    UnexpectedTypeError,
)

if TYPE_CHECKING:
    from geoproj.context import Context

logger = logging.getLogger(__name__)

MAX_SUB_CRS = 100

_DOUBLE_SIZE = np.dtype(np.float64).itemsize


class Direction(IntEnum):
    """Direction of a transformation."""

    FWD = 1
    IDENT = 0
    INV = -1


class WKTType(IntEnum):
    """WKT variants supported by PJ.as_wkt."""

    WKT2_2015 = 0
    WKT2_2015_SIMPLIFIED = 1
    WKT2_2019 = 2
    WKT2_2018 = 2
    WKT2_2019_SIMPLIFIED = 3
    WKT2_2018_SIMPLIFIED = 3
    WKT1_GDAL = 4
    WKT1_ESRI = 5

    @property
    def label(self) -> str:
        return f"PJ_{self.name}"


class PJType(str, Enum):
    """Kinds of PROJ objects, in the order of the native PJ_TYPE enumeration."""

    UNKNOWN = "UNKNOWN"
    ELLIPSOID = "ELLIPSOID"
    PRIME_MERIDIAN = "PRIME_MERIDIAN"
    GEODETIC_REFERENCE_FRAME = "GEODETIC_REFERENCE_FRAME"
    DYNAMIC_GEODETIC_REFERENCE_FRAME = "DYNAMIC_GEODETIC_REFERENCE_FRAME"
    VERTICAL_REFERENCE_FRAME = "VERTICAL_REFERENCE_FRAME"
    DYNAMIC_VERTICAL_REFERENCE_FRAME = "DYNAMIC_VERTICAL_REFERENCE_FRAME"
    DATUM_ENSEMBLE = "DATUM_ENSEMBLE"
    # Abstract, never returned for a concrete object.
    CRS = "CRS"
    GEODETIC_CRS = "GEODETIC_CRS"
    GEOCENTRIC_CRS = "GEOCENTRIC_CRS"
    # Abstract, never returned for a concrete object.
    GEOGRAPHIC_CRS = "GEOGRAPHIC_CRS"
    GEOGRAPHIC_2D_CRS = "GEOGRAPHIC_2D_CRS"
    GEOGRAPHIC_3D_CRS = "GEOGRAPHIC_3D_CRS"
    VERTICAL_CRS = "VERTICAL_CRS"
    PROJECTED_CRS = "PROJECTED_CRS"
    COMPOUND_CRS = "COMPOUND_CRS"
    TEMPORAL_CRS = "TEMPORAL_CRS"
    ENGINEERING_CRS = "ENGINEERING_CRS"
    BOUND_CRS = "BOUND_CRS"
    OTHER_CRS = "OTHER_CRS"
    CONVERSION = "CONVERSION"
    TRANSFORMATION = "TRANSFORMATION"
    CONCATENATED_OPERATION = "CONCATENATED_OPERATION"
    OTHER_COORDINATE_OPERATION = "OTHER_COORDINATE_OPERATION"
    TEMPORAL_DATUM = "TEMPORAL_DATUM"
    ENGINEERING_DATUM = "ENGINEERING_DATUM"
    PARAMETRIC_DATUM = "PARAMETRIC_DATUM"
    DERIVED_PROJECTED_CRS = "DERIVED_PROJECTED_CRS"
    COORDINATE_METADATA = "COORDINATE_METADATA"


_PJ_TYPES_BY_NATIVE = dict(enumerate(PJType))
NATIVE_PJ_TYPE_CRS = 8


def pj_type_from_native(value: int) -> PJType:
    """
    Map a native PJ_TYPE value onto PJType.

    Raises
    ------
    UnexpectedTypeError
        If PROJ returned a value this binding does not know, typically
        because PROJ is newer than geoproj.
    """
    try:
        return _PJ_TYPES_BY_NATIVE[value]
    except KeyError:
        raise UnexpectedTypeError(value) from None


@dataclass(frozen=True)
class PJInfo:
    """
    Information about a PJ.

    Attributes
    ----------
    id : str
        Short ID of the operation, e.g. "merc".
    description : str
        Long description, e.g. "CH1903+ / LV95".
    definition : str
        The proj-string the object was created from, if any.
    has_inverse : bool
        Whether an inverse mapping exists.
    accuracy : float
        Expected accuracy in metres, -1 if unknown.
    """

    id: str = ""
    description: str = ""
    definition: str = ""
    has_inverse: bool = False
    accuracy: float = 0.0


@dataclass(frozen=True)
class SRID:
    """Spatial reference identifier, e.g. ("EPSG", "4326")."""

    auth: str = ""
    code: str = ""

    def __str__(self) -> str:
        if not self.auth and not self.code:
            return ""
        return f"{self.auth}:{self.code}"


@dataclass(frozen=True)
class AreaOfUse:
    """Geographic bounding box (degrees) and name of an area of use."""

    west_lon: float
    south_lat: float
    east_lon: float
    north_lat: float
    name: str = ""


@dataclass
class IdentifyMatch:
    """A candidate from PJ.identify; ``pj`` belongs to the same context."""

    pj: "PJ"
    confidence: int


@dataclass(frozen=True)
class IdentifyMatchInfo:
    srid: SRID
    description: str
    confidence: int


@dataclass(frozen=True)
class FullPJInfo:
    """Combined snapshot returned by PJ.full_info."""

    info: PJInfo
    is_crs: bool
    type: PJType
    crs_matches: List[IdentifyMatchInfo] = field(default_factory=list)
    area_of_use: Optional[AreaOfUse] = None


class _NativeHandle:
    """Mutable holder of a native PJ pointer, shared with the finalizer."""

    __slots__ = ("ptr",)

    def __init__(self, ptr: int):
        self.ptr = ptr


def destroy_handle(handle: _NativeHandle) -> None:
    """Release ``handle``. The owning context's lock must be held."""
    if handle.ptr is not None:
        get_library().proj_destroy(handle.ptr)
        handle.ptr = None


def _reclaim_handle(context: "Context", handle: _NativeHandle) -> None:
    if handle.ptr is not None:
        logger.debug("Reclaiming PJ handle that was never destroyed explicitly")
    context._release_handle(handle)


@contextmanager
def _errno_scope(lib, ptr: int):
    """Reset the error number of ``ptr`` and restore the previous one on exit."""
    last_errno = lib.proj_errno_reset(ptr)
    try:
        yield
    finally:
        lib.proj_errno_restore(ptr, last_errno)


def _strided_pointer(axis: str, values: Optional[np.ndarray], stride: int, count: int):
    """Validate one strided axis of trans_generic and return its native pointer."""
    if values is None:
        if count:
            raise ValueError(f"{axis}: count is {count} but no array was given")
        return None
    if not isinstance(values, np.ndarray):
        raise TypeError(f"{axis} must be a numpy array, got {type(values)}")
    if not _is_native_buffer(values):
        raise ValueError(f"{axis} must be a writeable C-contiguous float64 array")
    if count < 0 or stride < 0:
        raise ValueError(f"{axis}: stride and count must not be negative")
    if count > 1 and stride < _DOUBLE_SIZE:
        raise ValueError(f"{axis}: stride {stride} is smaller than one float64")
    if count and (count - 1) * stride + _DOUBLE_SIZE > values.nbytes:
        raise ValueError(
            f"{axis}: {count} values with a stride of {stride} bytes exceed "
            f"the {values.nbytes} bytes of the array"
        )
    return values.ctypes.data_as(c_double_p)


def _coord_buffer(coords: np.ndarray) -> np.ndarray:
    if not _is_native_buffer(coords):
        raise ValueError("coordinate arrays must be writeable C-contiguous float64 arrays")
    if coords.ndim != 2 or coords.shape[1] != 4:
        raise ValueError(f"coordinate arrays must have shape (n, 4), got {coords.shape}")
    return coords


def _is_native_buffer(values: np.ndarray) -> bool:
    return values.dtype == np.float64 and values.flags.c_contiguous and values.flags.writeable


def _first_failed(values: np.ndarray) -> Optional[int]:
    """Index of the first coordinate PROJ marked as failed (non-finite)."""
    failed = ~np.isfinite(values)
    if failed.ndim > 1:
        failed = failed.any(axis=1)
    positions = np.flatnonzero(failed)
    return int(positions[0]) if positions.size else None


class PJ:
    """
    A projection, transformation or other PROJ object.

    Instances are created by Context factory methods, never directly. A PJ
    can be destroyed explicitly with :meth:`destroy` (or by leaving a ``with``
    block); otherwise it is released when garbage collected.
    """

    def __init__(self, context: "Context", ptr: int):
        self.context = context
        self._handle = _NativeHandle(ptr)
        self._finalizer = weakref.finalize(self, _reclaim_handle, context, self._handle)

    def __enter__(self) -> "PJ":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.destroy()

    def destroy(self) -> None:
        """Release all resources associated with this PJ. Safe to call repeatedly."""
        self._finalizer.detach()
        self.context._release_handle(self._handle)

    @property
    def destroyed(self) -> bool:
        return self._handle.ptr is None

    @contextmanager
    def _locked(self):
        with self.context._lock:
            ptr = self._handle.ptr
            if ptr is None:
                raise HandleDestroyedError("PJ has been destroyed")
            yield ptr

    @contextmanager
    def _native_call(self):
        lib = get_library()
        with self._locked() as ptr, _errno_scope(lib, ptr):
            yield ptr

    def _raise_errno(self, ptr: int, error_class=TransformError, **kwargs) -> None:
        errno = get_library().proj_errno(ptr)
        if errno:
            raise self.context._error(errno, error_class, **kwargs)

    # Derived objects

    def normalize_for_visualization(self) -> "PJ":
        """
        Return a new PJ whose axis order is the one expected for visualization.

        If the source or target CRS has northing/easting axis order an axis
        swap is inserted: geographic CRS become longitude, latitude[, height]
        and projected CRS easting, northing[, height]. This PJ is unchanged.
        """
        lib = get_library()
        with self._locked() as ptr:
            return self.context._new_pj(
                lib.proj_normalize_for_visualization(self.context._ptr, ptr)
            )

    def get_last_used_operation(self) -> "PJ":
        """Return the operation PROJ selected during the last transformation."""
        if not has_symbol("proj_trans_get_last_used_operation"):
            raise GeoprojError("get_last_used_operation requires PROJ >= 9.1")
        lib = get_library()
        with self._locked() as ptr:
            return self.context._new_pj(lib.proj_trans_get_last_used_operation(ptr))

    # Transformations

    def trans(self, direction: Direction, coord: Sequence[float]) -> Coord:
        """
        Transform a single coordinate.

        Raises
        ------
        TransformError
            If PROJ cannot transform ``coord``, e.g. because it lies outside
            the domain of the operation.
        """
        lib = get_library()
        coord = Coord(*coord)
        with self._native_call() as ptr:
            result = lib.proj_trans(ptr, int(direction), PJ_COORD(*coord))
            self._raise_errno(ptr)
        return Coord(result.x, result.y, result.z, result.t)

    def trans_array(self, direction: Direction, coords: Union[List[Coord], np.ndarray]) -> None:
        """
        Transform a batch of coordinates in place.

        Parameters
        ----------
        direction : Direction
            Direction of the transformation.
        coords : list of Coord or numpy.ndarray
            A list, whose elements are replaced only if the whole batch
            succeeds, or a writeable C-contiguous float64 array of shape
            (n, 4), which is transformed in place.

        Raises
        ------
        TransformError
            If any coordinate fails; ``index`` names the first one.
        """
        if len(coords) == 0:
            return
        if isinstance(coords, np.ndarray):
            buffer = _coord_buffer(coords)
        elif isinstance(coords, MutableSequence):
            buffer = np.array([tuple(Coord(*coord)) for coord in coords], dtype=np.float64)
        else:
            raise TypeError(f"coords must be a list or numpy array, got {type(coords)}")

        lib = get_library()
        with self._native_call() as ptr:
            errno = lib.proj_trans_array(
                ptr, int(direction), len(buffer), buffer.ctypes.data_as(PJ_COORD_p)
            )
            if errno:
                raise self.context._error(errno, TransformError, index=_first_failed(buffer))

        if buffer is not coords:
            coords[:] = [Coord(*row) for row in buffer.tolist()]

    def trans_bounds(self, direction: Direction, bounds: Bounds, densify_points: int = 21) -> Bounds:
        """
        Transform a bounding box.

        The edges are densified with ``densify_points`` intermediate points
        each and the returned box encloses all transformed points.
        """
        lib = get_library()
        xmin, ymin, xmax, ymax = Bounds(*bounds)
        out = [ctypes.c_double() for _ in range(4)]
        with self._native_call() as ptr:
            success = lib.proj_trans_bounds(
                self.context._ptr, ptr, int(direction),
                xmin, ymin, xmax, ymax,
                *(ctypes.byref(value) for value in out),
                int(densify_points),
            )
            errno = lib.proj_errno(ptr)
            if not success or errno:
                raise self.context._error(errno, TransformError)
        return Bounds(*(value.value for value in out))

    def trans_generic(
        self,
        direction: Direction,
        x: Optional[np.ndarray], sx: int, nx: int,
        y: Optional[np.ndarray], sy: int, ny: int,
        z: Optional[np.ndarray] = None, sz: int = 0, nz: int = 0,
        m: Optional[np.ndarray] = None, sm: int = 0, nm: int = 0,
    ) -> int:
        """
        Transform up to four independently strided arrays in place.

        Each axis is given as a float64 array (or None when absent), a stride
        in bytes and a count. A count of 1 broadcasts a single value, a count
        of 0 leaves the axis out.

        Returns
        -------
        int
            Number of transformed coordinates, always ``max(nx, ny, nz, nm)``.

        Raises
        ------
        ValueError
            If an axis description would read outside its array.
        TransformError
            If PROJ processed fewer coordinates than requested or reported an
            error for any of them.
        """
        pointers = (
            _strided_pointer("x", x, sx, nx),
            _strided_pointer("y", y, sy, ny),
            _strided_pointer("z", z, sz, nz),
            _strided_pointer("m", m, sm, nm),
        )
        expected = max(nx, ny, nz, nm)
        if expected == 0:
            return 0

        lib = get_library()
        with self._native_call() as ptr:
            count = lib.proj_trans_generic(
                ptr, int(direction),
                pointers[0], sx, nx,
                pointers[1], sy, ny,
                pointers[2], sz, nz,
                pointers[3], sm, nm,
            )
            if count != expected:
                raise self.context._error(
                    lib.proj_errno(ptr), TransformError,
                    what=f"transformed {count} of {expected} coordinates",
                )
            errno = lib.proj_errno(ptr)
            if errno:
                index = None
                if nx > 1 and sx % _DOUBLE_SIZE == 0:
                    index = _first_failed(x.reshape(-1)[:: sx // _DOUBLE_SIZE][:nx])
                raise self.context._error(errno, TransformError, index=index)
        return count

    def trans_flat_coords(
        self,
        direction: Direction,
        flat_coords: Union[List[float], np.ndarray],
        stride: int,
        z_index: int = -1,
        m_index: int = -1,
    ) -> None:
        """
        Transform coordinates stored interleaved in one flat buffer, in place.

        Every record holds ``stride`` values with x and y first. ``z_index``
        and ``m_index`` give the position of z and m inside a record, or -1
        when the record has no such value; absent values are not touched.
        Contiguous float64 arrays are transformed without copying; lists are
        updated only if the transformation succeeds.
        """
        if len(flat_coords) == 0:
            return
        if stride < 2:
            raise ValueError(f"stride must be at least 2, got {stride}")
        for name, index in (("z_index", z_index), ("m_index", m_index)):
            if index != -1 and not 2 <= index < stride:
                raise ValueError(f"{name} must be -1 or in [2, {stride}), got {index}")
        if z_index != -1 and z_index == m_index:
            raise ValueError("z_index and m_index must differ")

        in_place = isinstance(flat_coords, np.ndarray) and _is_native_buffer(flat_coords)
        if in_place:
            buffer = flat_coords.reshape(-1)
        else:
            buffer = np.array(flat_coords, dtype=np.float64).reshape(-1)

        n = len(buffer) // stride
        byte_stride = _DOUBLE_SIZE * stride
        z = buffer[z_index:] if z_index != -1 else None
        m = buffer[m_index:] if m_index != -1 else None
        self.trans_generic(
            direction,
            buffer, byte_stride, n,
            buffer[1:], byte_stride, n,
            z, byte_stride if z is not None else 0, n if z is not None else 0,
            m, byte_stride if m is not None else 0, n if m is not None else 0,
        )

        if not in_place:
            if isinstance(flat_coords, np.ndarray):
                flat_coords[...] = buffer.reshape(flat_coords.shape)
            else:
                flat_coords[:] = buffer.tolist()

    def trans_float64_list(self, direction: Direction, values: MutableSequence) -> MutableSequence:
        """
        Transform 2 to 4 values holding one coordinate, in place.

        Missing components are treated as 0 and the length of ``values`` is
        preserved. Returns ``values``.
        """
        if values is None or len(values) == 0:
            return values
        coord = float64_lists_to_coords([values])[0]
        result = self.trans(direction, coord)
        values[:] = list(result[: len(values)])
        return values

    def trans_float64_lists(self, direction: Direction, rows: Sequence[MutableSequence]) -> None:
        """
        Transform rows of 2 to 4 values in place, preserving each row's length.
        """
        if rows is None or len(rows) == 0:
            return
        coords = float64_lists_to_coords(rows)
        self.trans_array(direction, coords)
        for row, coord in zip(rows, coords):
            row[:] = list(coord[: len(row)])

    def forward(self, coord: Sequence[float]) -> Coord:
        return self.trans(Direction.FWD, coord)

    def inverse(self, coord: Sequence[float]) -> Coord:
        return self.trans(Direction.INV, coord)

    def forward_array(self, coords: Union[List[Coord], np.ndarray]) -> None:
        self.trans_array(Direction.FWD, coords)

    def inverse_array(self, coords: Union[List[Coord], np.ndarray]) -> None:
        self.trans_array(Direction.INV, coords)

    def forward_bounds(self, bounds: Bounds, densify_points: int = 21) -> Bounds:
        return self.trans_bounds(Direction.FWD, bounds, densify_points)

    def inverse_bounds(self, bounds: Bounds, densify_points: int = 21) -> Bounds:
        return self.trans_bounds(Direction.INV, bounds, densify_points)

    def forward_flat_coords(self, flat_coords, stride: int, z_index: int = -1, m_index: int = -1) -> None:
        self.trans_flat_coords(Direction.FWD, flat_coords, stride, z_index, m_index)

    def inverse_flat_coords(self, flat_coords, stride: int, z_index: int = -1, m_index: int = -1) -> None:
        self.trans_flat_coords(Direction.INV, flat_coords, stride, z_index, m_index)

    def forward_float64_list(self, values: MutableSequence) -> MutableSequence:
        return self.trans_float64_list(Direction.FWD, values)

    def inverse_float64_list(self, values: MutableSequence) -> MutableSequence:
        return self.trans_float64_list(Direction.INV, values)

    def forward_float64_lists(self, rows: Sequence[MutableSequence]) -> None:
        self.trans_float64_lists(Direction.FWD, rows)

    def inverse_float64_lists(self, rows: Sequence[MutableSequence]) -> None:
        self.trans_float64_lists(Direction.INV, rows)

    # Geodesic computations, on radian coordinates

    def geod(self, a: Sequence[float], b: Sequence[float]) -> Tuple[float, float, float]:
        """
        Return the distance, forward azimuth and reverse azimuth between a and b.

        ``a`` and ``b`` are geodetic coordinates in radians; azimuths are in
        degrees.
        """
        lib = get_library()
        with self._locked() as ptr:
            result = lib.proj_geod(ptr, PJ_COORD(*Coord(*a)), PJ_COORD(*Coord(*b)))
        return result.x, result.y, result.z

    def lp_dist(self, a: Sequence[float], b: Sequence[float]) -> float:
        """Geodesic distance between a and b, in radians, ignoring height."""
        lib = get_library()
        with self._locked() as ptr:
            return lib.proj_lp_dist(ptr, PJ_COORD(*Coord(*a)), PJ_COORD(*Coord(*b)))

    def lpz_dist(self, a: Sequence[float], b: Sequence[float]) -> float:
        """Geodesic distance between a and b, in radians, including height."""
        lib = get_library()
        with self._locked() as ptr:
            return lib.proj_lpz_dist(ptr, PJ_COORD(*Coord(*a)), PJ_COORD(*Coord(*b)))

    # Introspection

    def info(self) -> PJInfo:
        lib = get_library()
        with self._locked() as ptr:
            raw = lib.proj_pj_info(ptr)
            return PJInfo(
                id=decode(raw.id),
                description=decode(raw.description),
                definition=decode(raw.definition),
                has_inverse=raw.has_inverse != 0,
                accuracy=raw.accuracy,
            )

    def is_crs(self) -> bool:
        lib = get_library()
        with self._locked() as ptr:
            return lib.proj_is_crs(ptr) != 0

    def get_type(self) -> PJType:
        lib = get_library()
        with self._locked() as ptr:
            value = lib.proj_get_type(ptr)
        return pj_type_from_native(value)

    def get_srid(self) -> SRID:
        """Return the first identifier of this object, or an empty SRID."""
        lib = get_library()
        with self._locked() as ptr:
            return SRID(
                auth=decode(lib.proj_get_id_auth_name(ptr, 0)),
                code=decode(lib.proj_get_id_code(ptr, 0)),
            )

    def get_area_of_use(self) -> Optional[AreaOfUse]:
        """Return the area of use, or None if it is unknown or cannot be read."""
        lib = get_library()
        west, south, east, north = (ctypes.c_double() for _ in range(4))
        name = ctypes.c_char_p()
        with self._locked() as ptr:
            success = lib.proj_get_area_of_use(
                self.context._ptr, ptr,
                ctypes.byref(west), ctypes.byref(south),
                ctypes.byref(east), ctypes.byref(north),
                ctypes.byref(name),
            )
            if not success:
                return None
            return AreaOfUse(west.value, south.value, east.value, north.value, decode(name.value))

    def as_wkt(self, wkt_type: WKTType = WKTType.WKT2_2019) -> str:
        """
        Export this object as multi-line WKT.

        Raises
        ------
        IncompatibleExportError
            If PROJ returns no WKT, i.e. the object cannot be represented in
            ``wkt_type``. Carries the error number PROJ set, if any.
        ProjError
            If PROJ reported an error but still produced WKT.
        """
        lib = get_library()
        wkt_type = WKTType(wkt_type)
        with self._native_call() as ptr:
            wkt = lib.proj_as_wkt(self.context._ptr, ptr, int(wkt_type), None)
            errno = lib.proj_errno(ptr)
            if wkt is None:
                message = self.context.errno_string(errno) if errno else ""
                raise IncompatibleExportError(wkt_type, errno, message)
            if errno:
                raise self.context._error(errno, ProjError)
        return decode(wkt)

    def as_projjson(self) -> str:
        lib = get_library()
        with self._native_call() as ptr:
            projjson = lib.proj_as_projjson(self.context._ptr, ptr, None)
            self._raise_errno(ptr, ProjError)
            if projjson is None:
                raise self.context._error(0, ProjError, what="PROJJSON export failed")
        return decode(projjson)

    def get_sub_crs(self, index: int) -> Optional["PJ"]:
        """
        Return the sub-CRS at ``index`` of a compound CRS.

        Returns None past the last component.
        """
        lib = get_library()
        with self._native_call() as ptr:
            raw = lib.proj_crs_get_sub_crs(self.context._ptr, ptr, index)
            errno = lib.proj_errno(ptr)
            if errno:
                if raw:
                    lib.proj_destroy(raw)
                raise self.context._error(errno, ProjError, what=f"failed to get sub-crs {index}")
            if not raw:
                return None
            return self.context._new_pj(raw)

    def list_sub_crs(self) -> List["PJ"]:
        """
        Return all sub-CRS of a compound CRS.

        Raises
        ------
        SubCRSLimitError
            If PROJ does not signal the end of the list within MAX_SUB_CRS
            entries.
        """
        result = []
        with self.context._lock:
            try:
                for index in range(MAX_SUB_CRS):
                    sub_crs = self.get_sub_crs(index)
                    if sub_crs is None:
                        return result
                    result.append(sub_crs)
                raise SubCRSLimitError(MAX_SUB_CRS)
            except BaseException:
                for sub_crs in result:
                    sub_crs.destroy()
                raise

    def identify(self) -> List[IdentifyMatch]:
        """
        Match this CRS against the PROJ database.

        Returns
        -------
        list of IdentifyMatch
            Candidates with their confidence (0-100, 100 for an exact match).
            The order among candidates is defined by PROJ.
        """
        lib = get_library()
        confidence = ctypes.POINTER(ctypes.c_int)()
        matches: List[IdentifyMatch] = []
        with self._native_call() as ptr:
            context_ptr = self.context._ptr
            objects = lib.proj_identify(context_ptr, ptr, None, None, ctypes.byref(confidence))
            try:
                self._raise_errno(ptr, ProjError, what="failed to identify CRS")
                if not objects:
                    return matches
                for index in range(lib.proj_list_get_count(objects)):
                    raw = lib.proj_list_get(context_ptr, objects, index)
                    self._raise_errno(ptr, ProjError, what=f"failed to get candidate {index}")
                    matches.append(IdentifyMatch(self.context._new_pj(raw), int(confidence[index])))
            except BaseException:
                for match in matches:
                    match.pj.destroy()
                raise
            finally:
                lib.proj_list_destroy(objects)
                lib.proj_int_list_destroy(confidence)
        return matches

    def full_info(self) -> FullPJInfo:
        """
        Collect info, CRS-ness, type, area of use and database matches at once.

        Raises
        ------
        InfoQueryError
            Naming the query that failed; nothing partial is returned.
        """
        with self.context._lock:
            info = self.info()
            is_crs = self.is_crs()
            try:
                pj_type = self.get_type()
            except UnexpectedTypeError as err:
                raise InfoQueryError("get PJ type", err) from err
            area_of_use = self.get_area_of_use()

            crs_matches = []
            if is_crs:
                try:
                    candidates = self.identify()
                except ProjError as err:
                    raise InfoQueryError("identify CRS", err) from err
                try:
                    for match in candidates:
                        crs_matches.append(IdentifyMatchInfo(
                            srid=match.pj.get_srid(),
                            description=match.pj.info().description,
                            confidence=match.confidence,
                        ))
                finally:
                    for match in candidates:
                        match.pj.destroy()

        return FullPJInfo(
            info=info,
            is_crs=is_crs,
            type=pj_type,
            crs_matches=crs_matches,
            area_of_use=area_of_use,
        )
