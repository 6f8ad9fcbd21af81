import numpy as np
import pytest
from pyproj import CRS

from conftest import (
    FakeDimension,
    FakeGroup,
    FakeMDArray,
    FakeMultidimDataset,
    FakeSpatialRef,
    make_coordinate,
)
from gdalarray.config import LoadOptions
from gdalarray.multidim import (
    HORIZONTAL_Y,
    iter_arrays,
    load_mdarray,
    load_multidim,
    read_mdarray,
    root_attributes,
)
from gdalarray.types import GAUSSIAN_INT32, DataType, ExtendedDataClass, ScalarKind


@pytest.fixture
def temperature() -> FakeMDArray:
    """(time, lat, lon) Float64 grid with north-up latitude."""
    time = make_coordinate("time", np.array([0, 1], dtype=np.int32), DataType.INT32)
    lat = make_coordinate("lat", np.array([50.0, 40.0, 30.0]), DataType.FLOAT64, HORIZONTAL_Y)
    lon = make_coordinate("lon", np.array([0.0, 10.0]), DataType.FLOAT64, "HORIZONTAL_X")
    data = np.arange(12, dtype=np.float64).reshape(2, 3, 2)
    return FakeMDArray(
        "temperature",
        data,
        DataType.FLOAT64,
        dims=[time, lat, lon],
        unit="K",
        nodata=-1.0,
        attributes={"long_name": "air temperature", "valid_range": np.array([0, 400])},
    )


def _dataset(*arrays: FakeMDArray, **attributes) -> FakeMultidimDataset:
    coordinates = [
        dim.GetIndexingVariable() for array in arrays for dim in array.GetDimensions()
        if dim.GetIndexingVariable() is not None
    ]
    return FakeMultidimDataset(FakeGroup("/", [*arrays, *coordinates], attributes=attributes))


def test_load_mdarray_lower_origin_flips_north_up_axis(temperature: FakeMDArray) -> None:
    kind, array = load_mdarray(temperature)

    assert kind is ScalarKind.FLOAT64
    assert array.name == "temperature"
    assert array.dims == ("time", "lat", "lon")
    np.testing.assert_array_equal(array["lat"].values, [30.0, 40.0, 50.0])
    np.testing.assert_array_equal(array["time"].values, [0, 1])
    np.testing.assert_array_equal(array.values[0, 0], temperature.data[0, 2])
    assert array.attrs["units"] == "K"
    assert array.attrs["nodata"] == -1.0
    assert array.attrs["long_name"] == "air temperature"
    assert array.attrs["valid_range"] == "0,400"
    assert array.attrs["full_name"] == "/temperature"
    assert array.attrs["gdal_data_type"] == "Float64"
    assert array.attrs["origin"] == "lower"


def test_load_mdarray_upper_origin(temperature: FakeMDArray) -> None:
    _, array = load_mdarray(temperature, LoadOptions(origin="upper"))

    np.testing.assert_array_equal(array.values, temperature.data)
    np.testing.assert_array_equal(array["lat"].values, [50.0, 40.0, 30.0])


def test_load_mdarray_reversed_axes(temperature: FakeMDArray) -> None:
    _, array = load_mdarray(temperature, LoadOptions(axis_order="reversed"))

    assert array.dims == ("lon", "lat", "time")


def test_load_mdarray_masks_nodata(temperature: FakeMDArray) -> None:
    temperature.data[1, 1, 1] = -1.0

    _, array = load_mdarray(temperature, LoadOptions(origin="upper", mask_nodata=True))

    assert np.isnan(array.values[1, 1, 1])
    assert array.attrs["units"] == "K"


def test_load_mdarray_crs(temperature: FakeMDArray) -> None:
    temperature.srs = FakeSpatialRef(CRS.from_epsg(4326).to_wkt())

    _, array = load_mdarray(temperature)

    assert array.attrs["crs"] == "EPSG:4326"


def test_dimension_without_indexing_variable_has_no_coordinate() -> None:
    data = np.array([[1, 2], [3, 4]], dtype=np.uint16)
    array = FakeMDArray("counts", data, DataType.UINT16, dims=[FakeDimension("a", 2), FakeDimension("b", 2)])

    kind, result = load_mdarray(array)

    assert kind is ScalarKind.UINT16
    assert "a" not in result.coords
    np.testing.assert_array_equal(result.values, data)


def test_non_numeric_arrays_are_skipped(caplog: pytest.LogCaptureFixture) -> None:
    labels = FakeMDArray(
        "labels", np.zeros(2, dtype=np.uint8), DataType.UNKNOWN,
        dims=[FakeDimension("n", 2)], data_class=ExtendedDataClass.STRING,
    )

    assert load_mdarray(labels) is None
    assert "unsupported data type" in caplog.text


def test_read_mdarray_in_slabs() -> None:
    data = np.arange(10, dtype=np.int16).reshape(5, 2)
    array = FakeMDArray("x", data, DataType.INT16, dims=[FakeDimension("r", 5), FakeDimension("c", 2)])

    kind, out = read_mdarray(array, LoadOptions(chunk_rows=2))

    assert kind is ScalarKind.INT16
    np.testing.assert_array_equal(out, data)
    assert [read[0] for read in array.reads] == [[0, 0], [2, 0], [4, 0]]
    assert array.reads[-1][1] == [1, 2]


def test_read_mdarray_scalar() -> None:
    array = FakeMDArray("answer", np.array(42, dtype=np.int32), DataType.INT32)

    kind, out = read_mdarray(array, LoadOptions())

    assert kind is ScalarKind.INT32
    assert out.shape == ()
    assert int(out) == 42


def test_read_mdarray_complex_integers() -> None:
    data = np.zeros(3, dtype=GAUSSIAN_INT32)
    data[2] = (1, 2)
    array = FakeMDArray("iq", data, DataType.CINT32, dims=[FakeDimension("n", 3)])

    kind, out = read_mdarray(array, LoadOptions())
    assert kind is ScalarKind.COMPLEX128
    assert out[2] == 1 + 2j

    kind, out = read_mdarray(array, LoadOptions(complex_integers="gaussian"))
    assert kind is ScalarKind.GAUSSIAN32
    assert out["im"][2] == 2


def test_load_multidim_skips_indexing_variables(temperature: FakeMDArray) -> None:
    pressure = FakeMDArray(
        "pressure",
        np.ones((2,), dtype=np.float32),
        DataType.FLOAT32,
        dims=[temperature.GetDimensions()[0]],
        group="/surface",
    )
    root = FakeGroup(
        "/",
        [temperature] + [dim.GetIndexingVariable() for dim in temperature.GetDimensions()],
        groups=[FakeGroup("surface", [pressure])],
    )

    results = load_multidim(FakeMultidimDataset(root))

    assert [(kind, array.name) for kind, array in results] == [
        (ScalarKind.FLOAT64, "temperature"),
        (ScalarKind.FLOAT32, "pressure"),
    ]
    assert results[1][1].attrs["full_name"] == "/surface/pressure"


def test_iter_arrays_is_depth_first() -> None:
    a = FakeMDArray("a", np.zeros(1, np.uint8), DataType.BYTE)
    b = FakeMDArray("b", np.zeros(1, np.uint8), DataType.BYTE, group="/g")
    c = FakeMDArray("c", np.zeros(1, np.uint8), DataType.BYTE, group="/g/h")
    root = FakeGroup("/", [a], groups=[FakeGroup("g", [b], groups=[FakeGroup("h", [c])])])

    assert [array.GetName() for array in iter_arrays(root)] == ["a", "b", "c"]


def test_load_multidim_without_root_group() -> None:
    assert load_multidim(FakeMultidimDataset(None)) == []
    assert root_attributes(FakeMultidimDataset(None)) == {}


def test_root_attributes_are_text(temperature: FakeMDArray) -> None:
    dataset = _dataset(temperature, Conventions="CF-1.8", version=2, history=b"created")

    assert root_attributes(dataset) == {"Conventions": "CF-1.8", "version": "2", "history": "created"}
