"""
Tests for PJ introspection, export and identification.
"""

import json

import pytest

import geoproj.pj
from geoproj import (
    SRID,
    AreaOfUse,
    GeoprojError,
    IncompatibleExportError,
    PJType,
    ProjError,
    SubCRSLimitError,
    UnexpectedTypeError,
    WKTType,
)
from geoproj.pj import NATIVE_PJ_TYPE_CRS, pj_type_from_native

WGS84_WKT = """GEOGCRS["WGS 84",
  DATUM["World Geodetic System 1984",
    ELLIPSOID["WGS 84",6378137,298.257223563,LENGTHUNIT["metre",1]]],
  PRIMEM["Greenwich",0,ANGLEUNIT["degree",0.0174532925199433]],
  CS[ellipsoidal,2],
  AXIS["latitude",north],
  AXIS["longitude",east],
  ANGLEUNIT["degree",0.0174532925199433]]"""

FANTASY_WKT = """GEOGCRS["Fantasia Datum",
    ENSEMBLE["Fantasia Geodetic Ensemble",
        MEMBER["Fantasia Prime"],
        MEMBER["Fantasia Revision A"],
        ELLIPSOID["Fantasia Ellipsoid",6380000,300,
            LENGTHUNIT["metre",1]],
        ENSEMBLEACCURACY[5.0]],
    PRIMEM["Fantasia Zero Meridian",10,
        ANGLEUNIT["degree",0.0174532925199433]],
    CS[ellipsoidal,2],
        AXIS["funny latitude",north,
            ORDER[1],
            ANGLEUNIT["degree",0.0174532925199433]],
        AXIS["crazy longitude",east,
            ORDER[2],
            ANGLEUNIT["degree",0.0174532925199433]],
    USAGE[
        SCOPE["Fantasy-based geospatial referencing."],
        AREA["Imaginary Earth-like planet."],
        BBOX[-90,-180,90,180]],
    ID["CUSTOM",999999]]"""


class TestInfo:
    """Test basic object information."""

    def test_operation_info(self, context):
        info = context.new("+proj=merc +ellps=WGS84").info()
        assert info.id == "merc"
        assert "proj=merc" in info.definition
        assert info.has_inverse

    def test_crs_info(self, context):
        info = context.new("EPSG:4326").info()
        assert info.description == "WGS 84"
        assert info.accuracy == -1

    @pytest.mark.parametrize(
        "definition, expected",
        [
            ("EPSG:4326", PJType.GEOGRAPHIC_2D_CRS),
            ("EPSG:4979", PJType.GEOGRAPHIC_3D_CRS),
            ("EPSG:4978", PJType.GEOCENTRIC_CRS),
            ("EPSG:3857", PJType.PROJECTED_CRS),
            ("EPSG:5703", PJType.VERTICAL_CRS),
            ("+proj=longlat +datum=WGS84 +no_defs +type=crs", PJType.GEOGRAPHIC_2D_CRS),
            ("+proj=longlat +datum=WGS84", PJType.OTHER_COORDINATE_OPERATION),
        ],
    )
    def test_get_type(self, context, definition, expected):
        assert context.new(definition).get_type() == expected

    def test_is_crs(self, context, web_mercator):
        assert context.new("EPSG:4326").is_crs()
        assert not web_mercator.is_crs()

    def test_srid(self, context):
        srid = context.new("EPSG:3857").get_srid()
        assert srid == SRID("EPSG", "3857")
        assert str(srid) == "EPSG:3857"

    def test_srid_absent(self, context):
        srid = context.new("+proj=merc +ellps=WGS84").get_srid()
        assert srid == SRID()
        assert str(srid) == ""

    def test_area_of_use(self, context):
        area = context.new("EPSG:3857").get_area_of_use()
        assert isinstance(area, AreaOfUse)
        assert area.west_lon == pytest.approx(-180.0)
        assert area.east_lon == pytest.approx(180.0)
        assert area.north_lat == pytest.approx(85.06, abs=0.01)
        assert area.name

    def test_area_of_use_unknown(self, context):
        assert context.new(WGS84_WKT).get_area_of_use() is None


class TestNativeTypes:
    """Test the mapping of native enumerations."""

    def test_native_order(self):
        assert pj_type_from_native(0) == PJType.UNKNOWN
        assert pj_type_from_native(NATIVE_PJ_TYPE_CRS) == PJType.CRS
        assert pj_type_from_native(15) == PJType.PROJECTED_CRS
        assert pj_type_from_native(29) == PJType.COORDINATE_METADATA

    @pytest.mark.parametrize("value", [-1, 30, 99])
    def test_unknown_native_value(self, value):
        with pytest.raises(UnexpectedTypeError):
            pj_type_from_native(value)

    def test_wkt_type_labels(self):
        assert WKTType.WKT1_ESRI.label == "PJ_WKT1_ESRI"
        assert WKTType.WKT2_2018 is WKTType.WKT2_2019
        assert WKTType.WKT2_2018_SIMPLIFIED.label == "PJ_WKT2_2019_SIMPLIFIED"


class TestExport:
    """Test WKT and PROJJSON export."""

    @pytest.mark.parametrize(
        "wkt_type, prefix",
        [
            (WKTType.WKT2_2019, 'GEOGCRS["WGS 84"'),
            (WKTType.WKT2_2015, 'GEODCRS["WGS 84"'),
            (WKTType.WKT1_GDAL, 'GEOGCS["WGS 84"'),
            (WKTType.WKT1_ESRI, 'GEOGCS["GCS_WGS_1984"'),
        ],
    )
    def test_as_wkt(self, context, wkt_type, prefix):
        assert context.new("EPSG:4326").as_wkt(wkt_type).startswith(prefix)

    def test_wkt_round_trip(self, context):
        pj = context.new(context.new("EPSG:32633").as_wkt())
        assert pj.get_srid() == SRID("EPSG", "32633")

    @pytest.mark.parametrize(
        "definition",
        ["+proj=longlat +datum=WGS84", "+proj=axisswap +order=2,1"],
    )
    def test_as_wkt_incompatible(self, context, definition):
        pj = context.new(definition)
        with pytest.raises(IncompatibleExportError) as excinfo:
            pj.as_wkt(WKTType.WKT1_GDAL)
        assert excinfo.value.wkt_type == WKTType.WKT1_GDAL
        assert "PJ_WKT1_GDAL" in str(excinfo.value)

    def test_incompatible_export_leaves_pj_usable(self, context):
        pj = context.new("+proj=longlat +datum=WGS84")
        with pytest.raises(IncompatibleExportError):
            pj.as_wkt(WKTType.WKT1_GDAL)
        assert pj.info().id == "longlat"
        assert not pj.is_crs()

    def test_as_projjson(self, context):
        document = json.loads(context.new("EPSG:4326").as_projjson())
        assert document["type"] == "GeographicCRS"
        assert document["id"] == {"authority": "EPSG", "code": 4326}


class TestSubCRS:
    """Test compound CRS decomposition."""

    def test_list_sub_crs(self, context):
        compound = context.new("EPSG:5498")
        components = compound.list_sub_crs()
        assert [pj.get_type() for pj in components] == [
            PJType.GEOGRAPHIC_2D_CRS,
            PJType.VERTICAL_CRS,
        ]
        assert components[0].get_srid() == SRID("EPSG", "4269")

    def test_get_sub_crs_past_end(self, context):
        compound = context.create_compound_crs("", context.new("EPSG:4326"), context.new("EPSG:5703"))
        assert compound.get_sub_crs(1).get_srid() == SRID("EPSG", "5703")
        assert compound.get_sub_crs(2) is None

    def test_list_sub_crs_of_simple_crs(self, context):
        pj = context.new("EPSG:4326")
        with pytest.raises(ProjError):
            pj.list_sub_crs()
        assert context._state.handles == {pj._handle}

    def test_list_sub_crs_bound(self, context, monkeypatch):
        monkeypatch.setattr(geoproj.pj, "MAX_SUB_CRS", 1)
        compound = context.new("EPSG:5498")
        with pytest.raises(SubCRSLimitError) as excinfo:
            compound.list_sub_crs()
        assert excinfo.value.limit == 1
        assert context._state.handles == {compound._handle}


class TestIdentify:
    """Test CRS identification."""

    def test_identify_exact_wkt(self, context):
        matches = context.new(WGS84_WKT).identify()
        by_srid = {str(match.pj.get_srid()): match.confidence for match in matches}
        assert by_srid["EPSG:4326"] == 100
        assert all(match.pj.context is context for match in matches)

    def test_identify_proj_string(self, context):
        matches = context.new("+proj=longlat +datum=WGS84 +no_defs +type=crs").identify()
        assert "EPSG:4326" in {str(match.pj.get_srid()) for match in matches}
        assert all(0 <= match.confidence <= 100 for match in matches)

    def test_identify_unknown_crs(self, context):
        assert context.new(FANTASY_WKT).identify() == []


class TestFullInfo:
    """Test the combined snapshot."""

    def test_crs(self, context):
        info = context.new(WGS84_WKT).full_info()
        assert info.info.description == "WGS 84"
        assert info.is_crs
        assert info.type == PJType.GEOGRAPHIC_2D_CRS
        assert [(str(m.srid), m.confidence) for m in info.crs_matches] == [("EPSG:4326", 100)]
        assert info.area_of_use is None

    def test_candidates_are_released(self, context):
        pj = context.new(WGS84_WKT)
        pj.full_info()
        assert len(context._state.handles) == 1

    def test_area_of_use_from_wkt(self, context):
        info = context.new(FANTASY_WKT).full_info()
        assert info.crs_matches == []
        assert info.area_of_use == AreaOfUse(-180.0, -90.0, 180.0, 90.0, "Imaginary Earth-like planet.")

    def test_operation(self, context):
        info = context.new("+proj=longlat +datum=WGS84").full_info()
        assert not info.is_crs
        assert info.type == PJType.OTHER_COORDINATE_OPERATION
        assert info.crs_matches == []
        assert info.info.id == "longlat"


class TestDerivedObjects:
    """Test objects derived from an existing PJ."""

    def test_normalize_for_visualization(self, web_mercator):
        normalized = web_mercator.normalize_for_visualization()
        assert normalized is not web_mercator
        assert normalized.context is web_mercator.context
        assert not normalized.is_crs()

    def test_get_last_used_operation(self, web_mercator):
        try:
            web_mercator.forward((10.0, 10.0))
            operation = web_mercator.get_last_used_operation()
        except GeoprojError as err:
            if "requires PROJ" in str(err):
                pytest.skip(str(err))
            raise
        assert not operation.is_crs()
        assert operation.info().has_inverse
