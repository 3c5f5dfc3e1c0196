import warnings

import numpy
import pytest
import rasterio
from rasterio.transform import from_origin
from shapely.geometry import box

from goa_ecopath.mask.bathymetry import DepthRaster, crop_raster, \
    filter_depth_band, find_land, mask_raster, read_depth_raster, reclassify

from .util import CRS, LAND, make_depth_raster


def test_bounds():
    raster = make_depth_raster()
    assert raster.bounds == (-162., 52., -138., 62.)


def test_crop_raster():
    raster = make_depth_raster()
    cropped = crop_raster(raster, (-160., 52., -140., 61.))
    assert cropped.shape == (18, 40)
    assert cropped.bounds == (-160., 52., -140., 61.)
    assert numpy.array_equal(cropped.elevation,
                             raster.elevation[2:20, 4:44])


def test_crop_raster_composes_transform():
    raster = make_depth_raster()
    with warnings.catch_warnings():
        warnings.simplefilter('error', PendingDeprecationWarning)
        cropped = crop_raster(raster, (-160., 52., -140., 61.))
    assert cropped.transform == from_origin(-160., 61., 0.5, 0.5)


def test_crop_raster_partial_cells():
    raster = make_depth_raster()
    # any overlap with a cell keeps the whole cell
    cropped = crop_raster(raster, (-159.9, 52.1, -140.1, 60.9))
    assert cropped.bounds == (-160., 52., -140., 61.)


def test_crop_raster_outside():
    with pytest.raises(ValueError):
        crop_raster(make_depth_raster(), (0., 0., 10., 10.))


def test_mask_raster():
    raster = make_depth_raster()
    masked = mask_raster(raster, [box(-160., 54., -156., 61.)])
    inside = numpy.isfinite(masked.elevation)
    # cell centers from 159.75W to 156.25W and 54.25N to 60.75N
    assert numpy.count_nonzero(inside) == 8 * 14
    assert numpy.array_equal(masked.elevation[inside],
                             raster.elevation[inside])


def test_filter_depth_band_is_inclusive():
    transform = from_origin(0., 4., 1., 1.)
    elevation = numpy.array([[0.5, 0., -500.],
                             [-1000., -1000.5, numpy.nan]])
    raster = DepthRaster(elevation, transform, CRS)
    filtered = filter_depth_band(raster, -1000., 0.)
    assert numpy.array_equal(numpy.isfinite(filtered.elevation),
                             [[False, True, True], [True, False, False]])


def test_filter_depth_band_bad_band():
    with pytest.raises(ValueError):
        filter_depth_band(make_depth_raster(), 0., -1000.)


def test_reclassify():
    transform = from_origin(0., 2., 1., 1.)
    raster = DepthRaster([[-10., numpy.nan], [-300., -20.]], transform, CRS)
    labels, valid = reclassify(raster, label=7)
    assert labels.dtype == numpy.int32
    assert numpy.array_equal(labels, [[7, 0], [7, 7]])
    assert numpy.array_equal(valid, [[True, False], [True, True]])


def test_find_land():
    raster = make_depth_raster()
    land = find_land(raster, 0.)
    assert numpy.all(raster.elevation[land] == LAND)
    assert numpy.count_nonzero(land) == 4 * 48


def test_read_depth_raster(tmp_path):
    raster = make_depth_raster()
    elevation = raster.elevation.copy()
    elevation[0, 0] = -32768.
    filename = str(tmp_path / 'etopo.tif')
    with rasterio.open(filename, 'w', driver='GTiff',
                       height=raster.shape[0], width=raster.shape[1],
                       count=1, dtype='float32', crs=CRS,
                       transform=raster.transform, nodata=-32768.) as dst:
        dst.write(elevation.astype('float32'), 1)

    full = read_depth_raster(filename)
    assert full.shape == raster.shape
    assert numpy.isnan(full.elevation[0, 0])
    assert full.elevation[-1, -1] == raster.elevation[-1, -1]

    window = read_depth_raster(filename, bounds=(-160., 52., -140., 61.))
    assert window.shape == (18, 40)
    assert window.bounds == (-160., 52., -140., 61.)
    assert numpy.array_equal(window.elevation,
                             raster.elevation[2:20, 4:44])
