"""
Tests for the error taxonomy.
"""

import pytest

from geoproj import (
    CreationError,
    GeoprojError,
    IncompatibleExportError,
    InfoQueryError,
    ProjError,
    SubCRSLimitError,
    TransformError,
    UnexpectedTypeError,
    WKTType,
)
from geoproj.errors import (
    PROJ_ERR_COORD_TRANSFM,
    PROJ_ERR_COORD_TRANSFM_INVALID_COORD,
    PROJ_ERR_INVALID_OP,
    PROJ_ERR_INVALID_OP_WRONG_SYNTAX,
    PROJ_ERR_OTHER,
)


class TestErrors:
    """Test error classes and errno constants."""

    def test_errno_categories(self):
        assert PROJ_ERR_INVALID_OP_WRONG_SYNTAX & PROJ_ERR_INVALID_OP
        assert PROJ_ERR_COORD_TRANSFM_INVALID_COORD & PROJ_ERR_COORD_TRANSFM
        assert not PROJ_ERR_COORD_TRANSFM_INVALID_COORD & PROJ_ERR_OTHER

    @pytest.mark.parametrize(
        "error_class",
        [CreationError, TransformError, ProjError],
    )
    def test_proj_errors_carry_errno(self, error_class):
        err = error_class(PROJ_ERR_INVALID_OP_WRONG_SYNTAX, "bad syntax")
        assert isinstance(err, GeoprojError)
        assert err.errno == PROJ_ERR_INVALID_OP_WRONG_SYNTAX
        assert str(err) == "bad syntax"

    def test_transform_error_index(self):
        err = TransformError(PROJ_ERR_COORD_TRANSFM_INVALID_COORD, "Invalid coordinate", index=3)
        assert err.index == 3
        assert str(err) == "Invalid coordinate (coordinate 3)"
        assert TransformError(1, "x").index is None

    def test_incompatible_export_message(self):
        err = IncompatibleExportError(WKTType.WKT1_ESRI)
        assert str(err) == "projection not compatible with an export to PJ_WKT1_ESRI"
        assert err.errno == 0

    def test_incompatible_export_carries_errno(self):
        err = IncompatibleExportError(WKTType.WKT1_GDAL, PROJ_ERR_OTHER, "Unknown error")
        assert err.errno == PROJ_ERR_OTHER
        assert err.detail == "Unknown error"
        assert str(err) == "projection not compatible with an export to PJ_WKT1_GDAL: Unknown error"
        assert not isinstance(err, ProjError)

    def test_other_messages(self):
        assert "99" in str(UnexpectedTypeError(99))
        assert str(SubCRSLimitError(100)) == "listing sub-crs aborted after 100 runs"

    def test_info_query_error_names_query(self):
        cause = ProjError(PROJ_ERR_OTHER, "boom")
        err = InfoQueryError("identify CRS", cause)
        assert err.query == "identify CRS"
        assert str(err) == "failed to identify CRS: boom"
