"""
PROJ contexts.

A Context owns one native PJ_CONTEXT and is the only way to create PJ
handles. PROJ contexts are not thread safe, so every native call touching a
context, or any PJ created through it, holds the context's lock.

Module level functions mirror the Context methods on a process-wide default
context created on first use.
"""

import itertools
import logging
import threading
import weakref
from contextlib import ExitStack, contextmanager
from enum import IntEnum
from typing import List, Optional, Sequence, Set, Union

from geoproj._native import (
    decode,
    default_search_paths,
    encode,
    get_library,
    has_symbol,
    string_array,
    string_list_to_python,
)
from geoproj.config import get_settings
from geoproj.coord import Area
from geoproj.errors import CreationError, GeoprojError, HandleDestroyedError, ProjError
from geoproj.pj import NATIVE_PJ_TYPE_CRS, PJ, _NativeHandle, destroy_handle

logger = logging.getLogger(__name__)


class LogLevel(IntEnum):
    """Verbosity of PROJ's own logging."""

    NONE = 0
    ERROR = 1
    DEBUG = 2
    TRACE = 3
    TELL = 4


_serials = itertools.count(1)


class _ContextState:
    """Native pointer and live PJ handles of a context, shared with its finalizer."""

    __slots__ = ("ptr", "handles")

    def __init__(self, ptr: int):
        self.ptr: Optional[int] = ptr
        self.handles: Set[_NativeHandle] = set()


def _release_context(lock: threading.RLock, state: _ContextState) -> None:
    with lock:
        if state.ptr is None:
            return
        # PJs reference their context natively, so they go first.
        for handle in list(state.handles):
            destroy_handle(handle)
        state.handles.clear()
        get_library().proj_context_destroy(state.ptr)
        state.ptr = None


def _reclaim_context(lock: threading.RLock, state: _ContextState, serial: int) -> None:
    if state.ptr is not None:
        logger.debug("Reclaiming context %d that was never destroyed explicitly", serial)
    _release_context(lock, state)


@contextmanager
def _native_area(area: Optional[Area]):
    """Yield a native PJ_AREA for ``area`` (or None) that is destroyed on exit."""
    if area is None:
        yield None
        return
    lib = get_library()
    ptr = lib.proj_area_create()
    try:
        lib.proj_area_set_bbox(ptr, area.west, area.south, area.east, area.north)
        if area.name and has_symbol("proj_area_set_name"):
            lib.proj_area_set_name(ptr, encode(area.name))
        yield ptr
    finally:
        lib.proj_area_destroy(ptr)


@contextmanager
def lock_contexts(*contexts: "Context"):
    """
    Hold the locks of all distinct ``contexts``.

    Locks are taken in the order in which the contexts were created, so two
    threads composing objects of the same contexts in opposite roles cannot
    deadlock. A context listed several times is locked once.
    """
    distinct = {context._serial: context for context in contexts}
    with ExitStack() as stack:
        for serial in sorted(distinct):
            stack.enter_context(distinct[serial]._lock)
        yield


class Context:
    """
    A PROJ context.

    Parameters
    ----------
    log_level : LogLevel, optional
        Native log level; defaults to the configured level (NONE).
    search_paths : sequence of str, optional
        Directories PROJ searches for proj.db and grids; defaults to the
        configured data directory, else pyproj's data directory.

    Contexts are released by :meth:`destroy`, by leaving a ``with`` block or,
    failing both, when garbage collected. Destroying a context also destroys
    every PJ it created.
    """

    def __init__(
        self,
        log_level: Optional[LogLevel] = None,
        search_paths: Optional[Sequence[str]] = None,
    ):
        lib = get_library()
        ptr = lib.proj_context_create()
        if not ptr:
            raise GeoprojError("proj_context_create failed")
        self._serial = next(_serials)
        self._lock = threading.RLock()
        self._state = _ContextState(ptr)
        self._finalizer = weakref.finalize(
            self, _reclaim_context, self._lock, self._state, self._serial
        )

        if log_level is None:
            log_level = LogLevel[get_settings().log_level.upper()]
        self.set_log_level(log_level)
        if search_paths is None:
            search_paths = default_search_paths()
        if search_paths:
            self.set_search_paths(search_paths)
        logger.debug("Created context %d", self._serial)

    def __enter__(self) -> "Context":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.destroy()

    def __repr__(self) -> str:
        state = "destroyed" if self.destroyed else "active"
        return f"<Context {self._serial} ({state})>"

    def destroy(self) -> None:
        """Release the native context and all PJs created by it. Safe to call repeatedly."""
        self._finalizer.detach()
        if self._state.ptr is not None:
            logger.debug("Destroying context %d", self._serial)
        _release_context(self._lock, self._state)

    @property
    def destroyed(self) -> bool:
        return self._state.ptr is None

    @property
    def _ptr(self) -> int:
        # Callers hold the lock.
        ptr = self._state.ptr
        if ptr is None:
            raise HandleDestroyedError("context has been destroyed")
        return ptr

    @contextmanager
    def _locked(self):
        with self._lock:
            yield self._ptr

    def _release_handle(self, handle: _NativeHandle) -> None:
        with self._lock:
            destroy_handle(handle)
            self._state.handles.discard(handle)

    def _new_pj(self, ptr: Optional[int]) -> PJ:
        """Wrap a freshly created native PJ, or raise for NULL. The lock must be held."""
        if not ptr:
            errno = get_library().proj_context_errno(self._ptr)
            raise self._error(errno, CreationError)
        pj = PJ(self, ptr)
        self._state.handles.add(pj._handle)
        return pj

    def _error(self, errno: int, error_class=ProjError, what: Optional[str] = None, **kwargs) -> ProjError:
        message = self.errno_string(errno)
        if what:
            message = f"{what}: {message}"
        return error_class(errno, message, **kwargs)

    def errno_string(self, errno: int) -> str:
        """Return PROJ's text for error number ``errno``."""
        if errno == 0:
            return "unknown error"
        with self._locked() as ptr:
            message = decode(get_library().proj_context_errno_string(ptr, errno))
        return message or f"unknown error (code {errno})"

    def set_log_level(self, log_level: LogLevel) -> None:
        with self._locked() as ptr:
            get_library().proj_log_level(ptr, int(LogLevel(log_level)))

    def set_search_paths(self, paths: Optional[Sequence[str]]) -> None:
        """Set the directories PROJ searches for its data files."""
        paths = list(paths or [])
        array = string_array(paths)
        with self._locked() as ptr:
            get_library().proj_context_set_search_paths(ptr, len(paths), array)

    # Factories

    def new(self, definition: str) -> PJ:
        """
        Create a PJ from a proj-string, WKT, PROJJSON or "AUTH:CODE".

        Raises
        ------
        CreationError
            If PROJ cannot create an object from ``definition``.
        """
        with self._locked() as ptr:
            return self._new_pj(get_library().proj_create(ptr, encode(definition)))

    def new_from_args(self, *args: str) -> PJ:
        """Create a PJ from proj-string tokens, e.g. ``"proj=utm", "zone=32"``."""
        argv = string_array(args)
        with self._locked() as ptr:
            return self._new_pj(get_library().proj_create_argv(ptr, len(args), argv))

    def new_crs_to_crs(self, source_crs: str, target_crs: str, area: Optional[Area] = None) -> PJ:
        """
        Create a transformation between two CRS given as strings.

        When several operations exist, ``area`` narrows the choice to the
        most accurate operation valid in that area.
        """
        with self._locked() as ptr, _native_area(area) as area_ptr:
            return self._new_pj(get_library().proj_create_crs_to_crs(
                ptr, encode(source_crs), encode(target_crs), area_ptr
            ))

    def new_crs_to_crs_from_pj(
        self,
        source_pj: PJ,
        target_pj: PJ,
        area: Optional[Area] = None,
        options: Union[str, Sequence[str], None] = None,
    ) -> PJ:
        """
        Create a transformation between two CRS objects.

        ``source_pj`` and ``target_pj`` may belong to other contexts; the
        result belongs to this one. ``options`` are ``KEY=VALUE`` strings
        understood by proj_create_crs_to_crs_from_pj, e.g. "AUTHORITY=EPSG".
        """
        if isinstance(options, str):
            options = [options] if options else []
        option_array = string_array(options, null_terminated=True) if options else None
        with lock_contexts(self, source_pj.context, target_pj.context):
            with source_pj._locked() as source_ptr, target_pj._locked() as target_ptr, \
                    _native_area(area) as area_ptr:
                return self._new_pj(get_library().proj_create_crs_to_crs_from_pj(
                    self._ptr, source_ptr, target_ptr, area_ptr, option_array
                ))

    def create_compound_crs(self, name: str, horizontal_pj: PJ, vertical_pj: PJ) -> PJ:
        """
        Combine a horizontal and a vertical CRS into a compound CRS.

        An empty ``name`` leaves the compound CRS unnamed.
        """
        encoded_name = encode(name) if name else None
        with lock_contexts(self, horizontal_pj.context, vertical_pj.context):
            with horizontal_pj._locked() as horizontal_ptr, vertical_pj._locked() as vertical_ptr:
                return self._new_pj(get_library().proj_create_compound_crs(
                    self._ptr, encoded_name, horizontal_ptr, vertical_ptr
                ))

    # Database

    def _string_list(self, ptr: Optional[int], what: str) -> List[str]:
        """Decode and release a native string list; NULL means failure. The lock must be held."""
        lib = get_library()
        if not ptr:
            raise self._error(lib.proj_context_errno(self._ptr), what=what)
        try:
            return string_list_to_python(ptr)
        finally:
            lib.proj_string_list_destroy(ptr)

    def get_authorities_from_database(self) -> List[str]:
        """
        Return the authorities known to the database, e.g. "EPSG", "ESRI".

        The order depends on the database and should not be relied upon.
        """
        with self._locked() as ptr:
            return self._string_list(
                get_library().proj_get_authorities_from_database(ptr),
                "failed to list authorities from database",
            )

    def get_all_crs_codes(self) -> List[str]:
        """Return every non-deprecated CRS of every authority as "AUTH:CODE"."""
        lib = get_library()
        codes = []
        with self._locked() as ptr:
            authorities = self._string_list(
                lib.proj_get_authorities_from_database(ptr),
                "failed to list authorities from database",
            )
            for authority in authorities:
                authority_codes = self._string_list(
                    lib.proj_get_codes_from_database(ptr, encode(authority), NATIVE_PJ_TYPE_CRS, 0),
                    f"failed to list codes for authority {authority}",
                )
                codes.extend(f"{authority}:{code}" for code in authority_codes)
        return codes


_default_context: Optional[Context] = None
_default_context_lock = threading.Lock()


def get_default_context() -> Context:
    """Return the process-wide default context, creating it on first use."""
    global _default_context
    if _default_context is None:
        with _default_context_lock:
            if _default_context is None:
                _default_context = Context()
    return _default_context


def set_log_level(log_level: LogLevel) -> None:
    get_default_context().set_log_level(log_level)


def set_search_paths(paths: Optional[Sequence[str]]) -> None:
    get_default_context().set_search_paths(paths)


def new(definition: str) -> PJ:
    return get_default_context().new(definition)


def new_from_args(*args: str) -> PJ:
    return get_default_context().new_from_args(*args)


def new_crs_to_crs(source_crs: str, target_crs: str, area: Optional[Area] = None) -> PJ:
    return get_default_context().new_crs_to_crs(source_crs, target_crs, area)


def new_crs_to_crs_from_pj(
    source_pj: PJ,
    target_pj: PJ,
    area: Optional[Area] = None,
    options: Union[str, Sequence[str], None] = None,
) -> PJ:
    return get_default_context().new_crs_to_crs_from_pj(source_pj, target_pj, area, options)


def create_compound_crs(name: str, horizontal_pj: PJ, vertical_pj: PJ) -> PJ:
    """Combine two CRS into a compound CRS; ``name`` may be empty."""
    return get_default_context().create_compound_crs(name, horizontal_pj, vertical_pj)


def get_authorities_from_database() -> List[str]:
    return get_default_context().get_authorities_from_database()


def get_all_crs_codes() -> List[str]:
    return get_default_context().get_all_crs_codes()
