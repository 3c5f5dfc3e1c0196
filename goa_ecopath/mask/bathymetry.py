import numpy
import rasterio
import rasterio.features
import rasterio.warp
from rasterio.transform import Affine
from rasterio.windows import Window


class DepthRaster(object):
    """
    Elevation on a regular grid, negative below sea level, with ``NaN``
    where there is no data

    Attributes
    ----------
    elevation : numpy.ndarray
        A 2D array of elevation (m) with rows running north to south

    transform : affine.Affine
        The transform from (column, row) indices to (x, y) coordinates of the
        upper-left corner of each cell

    crs : rasterio.crs.CRS or str
        The coordinate reference system of the raster
    """

    def __init__(self, elevation, transform, crs):
        self.elevation = numpy.asarray(elevation, dtype=float)
        self.transform = transform
        self.crs = crs

    @property
    def shape(self):
        return self.elevation.shape

    @property
    def bounds(self):
        """ The (left, bottom, right, top) extent of the raster """
        nrows, ncols = self.shape
        xs, ys = zip(self.transform * (0, 0),
                     self.transform * (ncols, nrows))
        return min(xs), min(ys), max(xs), max(ys)

    def replace(self, elevation):
        """ A new raster on the same grid with different elevation """
        return DepthRaster(elevation, self.transform, self.crs)


def read_depth_raster(filename, bounds=None, bounds_crs=None, band=1,
                      logger=None):
    """
    Read elevation from a raster file, optionally only the part covering the
    given bounds

    Parameters
    ----------
    filename : str
        A raster file (e.g. an ETOPO GeoTIFF) that rasterio can read

    bounds : tuple of float, optional
        The (minx, miny, maxx, maxy) extent to read

    bounds_crs : str, optional
        The CRS of ``bounds`` if it differs from the raster's

    band : int, optional
        The band holding elevation

    logger : logging.Logger, optional
        A logger for the output if not stdout

    Returns
    -------
    raster : goa_ecopath.mask.bathymetry.DepthRaster
        The elevation with no-data values set to ``NaN``
    """
    with rasterio.open(filename) as src:
        if bounds is None:
            window = None
        else:
            if bounds_crs is not None:
                bounds = rasterio.warp.transform_bounds(bounds_crs, src.crs,
                                                        *bounds)
            rows, cols = _bounds_to_slices(src.transform, src.shape, bounds)
            window = Window.from_slices(rows, cols)

        data = src.read(band, window=window, masked=True)
        if window is None:
            transform = src.transform
        else:
            transform = src.window_transform(window)
        crs = src.crs

    elevation = numpy.ma.filled(data.astype(float), numpy.nan)
    if logger is not None:
        logger.info(f'  Read {elevation.shape[0]} x {elevation.shape[1]} '
                    f'elevation cells from {filename}')
    return DepthRaster(elevation, transform, crs)


def crop_raster(raster, bounds):
    """
    Crop a raster to the cells that overlap the given bounds

    Parameters
    ----------
    raster : goa_ecopath.mask.bathymetry.DepthRaster
        The raster to crop

    bounds : tuple of float
        The (minx, miny, maxx, maxy) extent in the raster's CRS

    Returns
    -------
    cropped : goa_ecopath.mask.bathymetry.DepthRaster
        The cropped raster
    """
    (row0, row1), (col0, col1) = _bounds_to_slices(raster.transform,
                                                   raster.shape, bounds)
    elevation = raster.elevation[row0:row1, col0:col1]
    transform = raster.transform @ Affine.translation(col0, row0)
    return DepthRaster(elevation, transform, raster.crs)


def mask_raster(raster, geometries, all_touched=False):
    """
    Set cells outside of all the given polygons to ``NaN``

    Parameters
    ----------
    raster : goa_ecopath.mask.bathymetry.DepthRaster
        The raster to mask

    geometries : list of shapely.geometry.base.BaseGeometry
        Polygons in the raster's CRS

    all_touched : bool, optional
        Whether to keep every cell a polygon touches, rather than only cells
        with their centers inside a polygon

    Returns
    -------
    masked : goa_ecopath.mask.bathymetry.DepthRaster
        The masked raster
    """
    inside = rasterio.features.geometry_mask(
        geometries, out_shape=raster.shape, transform=raster.transform,
        all_touched=all_touched, invert=True)
    return raster.replace(numpy.where(inside, raster.elevation, numpy.nan))


def filter_depth_band(raster, min_elevation=-1000., max_elevation=0.):
    """
    Set cells outside of an elevation band to ``NaN``.  Both ends of the band
    are included.

    Parameters
    ----------
    raster : goa_ecopath.mask.bathymetry.DepthRaster
        The raster to filter

    min_elevation, max_elevation : float, optional
        The elevation band (m) to keep

    Returns
    -------
    filtered : goa_ecopath.mask.bathymetry.DepthRaster
        The filtered raster
    """
    if min_elevation > max_elevation:
        raise ValueError(f'min_elevation {min_elevation} is above '
                         f'max_elevation {max_elevation}')
    elevation = raster.elevation
    inBand = numpy.logical_and(elevation >= min_elevation,
                               elevation <= max_elevation)
    return raster.replace(numpy.where(inBand, elevation, numpy.nan))


def reclassify(raster, label=1):
    """
    Give every valid cell the same integer label

    Parameters
    ----------
    raster : goa_ecopath.mask.bathymetry.DepthRaster
        The raster to reclassify

    label : int, optional
        The label for valid cells

    Returns
    -------
    labels : numpy.ndarray
        An int32 array of ``label`` for valid cells and 0 elsewhere

    valid : numpy.ndarray
        A boolean array, ``True`` for valid cells
    """
    valid = numpy.isfinite(raster.elevation)
    labels = numpy.where(valid, label, 0).astype(numpy.int32)
    return labels, valid


def find_land(raster, max_elevation=0.):
    """
    Find cells above the given elevation

    Parameters
    ----------
    raster : goa_ecopath.mask.bathymetry.DepthRaster
        The raster

    max_elevation : float, optional
        The elevation (m) above which a cell is land

    Returns
    -------
    land : numpy.ndarray
        A boolean array, ``True`` for land cells
    """
    elevation = raster.elevation
    return numpy.logical_and(numpy.isfinite(elevation),
                             elevation > max_elevation)


def _bounds_to_slices(transform, shape, bounds):
    """
    Row and column index ranges of the cells that overlap the given bounds
    """
    minx, miny, maxx, maxy = bounds
    inverse = ~transform
    corners = [inverse * (x, y) for x in (minx, maxx) for y in (miny, maxy)]
    cols = [corner[0] for corner in corners]
    rows = [corner[1] for corner in corners]

    nrows, ncols = shape
    row0 = max(int(numpy.floor(min(rows))), 0)
    row1 = min(int(numpy.ceil(max(rows))), nrows)
    col0 = max(int(numpy.floor(min(cols))), 0)
    col1 = min(int(numpy.ceil(max(cols))), ncols)
    if row0 >= row1 or col0 >= col1:
        raise ValueError(f'Bounds {bounds} do not overlap the raster')
    return (row0, row1), (col0, col1)
