"""
Exceptions raised by geoproj.

Native failures are translated where the native call is made into a
ProjError subclass carrying the PROJ error number and the message PROJ
renders for it. The message depends on the PROJ version and must be treated
as informational; the error number is stable and can be compared against the
PROJ_ERR_* constants below.
"""

from typing import Optional

# Error numbers of PROJ >= 8, grouped by category.
PROJ_ERR_INVALID_OP = 1024
PROJ_ERR_INVALID_OP_WRONG_SYNTAX = PROJ_ERR_INVALID_OP + 1
PROJ_ERR_INVALID_OP_MISSING_ARG = PROJ_ERR_INVALID_OP + 2
PROJ_ERR_INVALID_OP_ILLEGAL_ARG_VALUE = PROJ_ERR_INVALID_OP + 3
PROJ_ERR_INVALID_OP_MUTUALLY_EXCLUSIVE_ARGS = PROJ_ERR_INVALID_OP + 4
PROJ_ERR_INVALID_OP_FILE_NOT_FOUND_OR_INVALID = PROJ_ERR_INVALID_OP + 5

PROJ_ERR_COORD_TRANSFM = 2048
PROJ_ERR_COORD_TRANSFM_INVALID_COORD = PROJ_ERR_COORD_TRANSFM + 1
PROJ_ERR_COORD_TRANSFM_OUTSIDE_PROJECTION_DOMAIN = PROJ_ERR_COORD_TRANSFM + 2
PROJ_ERR_COORD_TRANSFM_NO_OPERATION = PROJ_ERR_COORD_TRANSFM + 3
PROJ_ERR_COORD_TRANSFM_OUTSIDE_GRID = PROJ_ERR_COORD_TRANSFM + 4
PROJ_ERR_COORD_TRANSFM_GRID_AT_NODATA = PROJ_ERR_COORD_TRANSFM + 5
PROJ_ERR_COORD_TRANSFM_NO_CONVERGENCE = PROJ_ERR_COORD_TRANSFM + 6
PROJ_ERR_COORD_TRANSFM_MISSING_TIME = PROJ_ERR_COORD_TRANSFM + 7

PROJ_ERR_OTHER = 4096
PROJ_ERR_OTHER_API_MISUSE = PROJ_ERR_OTHER + 1
PROJ_ERR_OTHER_NO_INVERSE_OP = PROJ_ERR_OTHER + 2
PROJ_ERR_OTHER_NETWORK_ERROR = PROJ_ERR_OTHER + 3


class GeoprojError(Exception):
    """Base class for all geoproj errors."""


class LibraryNotFoundError(GeoprojError):
    """Raised when the PROJ shared library cannot be located or loaded."""


class HandleDestroyedError(GeoprojError):
    """Raised when a destroyed Context or PJ (or a PJ of a destroyed Context) is used."""


class ProjError(GeoprojError):
    """
    An error reported by PROJ through its error number.

    Attributes
    ----------
    errno : int
        The PROJ error number (0 if PROJ reported failure without one).
    message : str
        The message PROJ rendered for ``errno``.
    """

    def __init__(self, errno: int, message: str):
        super().__init__(message)
        self.errno = errno
        self.message = message


class CreationError(ProjError):
    """PROJ could not create an object from the given definition."""


class TransformError(ProjError):
    """
    A transformation failed for the given input.

    The PJ stays usable; later calls with valid input succeed.

    Attributes
    ----------
    index : int or None
        Position of the first failing coordinate in a batch call, if known.
    """

    def __init__(self, errno: int, message: str, index: Optional[int] = None):
        if index is not None:
            message = f"{message} (coordinate {index})"
        super().__init__(errno, message)
        self.index = index


class IncompatibleExportError(GeoprojError):
    """
    The object cannot be exported to the requested WKT variant.

    Attributes
    ----------
    wkt_type : WKTType
        The requested variant.
    errno : int
        The error number PROJ set while refusing the export, 0 if none.
    detail : str
        The message PROJ rendered for ``errno``, empty if none.
    """

    def __init__(self, wkt_type, errno: int = 0, detail: str = ""):
        message = f"projection not compatible with an export to {wkt_type.label}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.wkt_type = wkt_type
        self.errno = errno
        self.detail = detail


class UnexpectedTypeError(GeoprojError):
    """PROJ returned an object type this binding does not know about."""

    def __init__(self, value: int):
        super().__init__(f"unexpected PJ_TYPE: {value}")
        self.value = value


class SubCRSLimitError(GeoprojError):
    """Sub-CRS enumeration did not reach the end of the list within its bound."""

    def __init__(self, limit: int):
        super().__init__(f"listing sub-crs aborted after {limit} runs")
        self.limit = limit


class InfoQueryError(GeoprojError):
    """One of the queries combined by PJ.full_info failed."""

    def __init__(self, query: str, cause: Exception):
        super().__init__(f"failed to {query}: {cause}")
        self.query = query
