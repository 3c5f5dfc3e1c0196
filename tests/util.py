import numpy
import geopandas
import xarray
from rasterio.transform import from_origin
from shapely.geometry import box

from goa_ecopath.mask.bathymetry import DepthRaster

CRS = 'EPSG:4326'

MODEL_CODES = {'WGOA': [610, 620, 630], 'EGOA': [640, 650]}

# elevations (m) of the synthetic Gulf of Alaska
LAND = 100.
DEEP = -3000.
SEAMOUNT = -400.


def make_statistical_areas():
    """
    Five side-by-side statistical areas reaching from the coast to deep
    water, plus two smaller offshore polygons that reuse code 650 and an area
    from another region
    """
    rows = [(610, 'GOA', box(-160., 54., -156., 61.)),
            (620, 'GOA', box(-156., 54., -152., 61.)),
            (630, 'GOA', box(-152., 54., -148., 61.)),
            (640, 'GOA', box(-148., 54., -144., 61.)),
            (650, 'GOA', box(-144., 54., -140., 61.)),
            (650, 'GOA', box(-142., 52.5, -140., 54.)),
            (650, 'GOA', box(-141., 52., -140., 52.5)),
            (541, 'BSAI', box(-166., 54., -162., 61.))]
    codes, regions, geometries = zip(*rows)
    return geopandas.GeoDataFrame(
        {'REP_AREA': list(codes), 'REGION': list(regions)},
        geometry=list(geometries), crs=CRS)


def make_depth_raster():
    """
    Half-degree elevation from 162W to 138W and 52N to 62N: land north of
    60N, a continental shelf between 57N and 60N that gets deeper offshore,
    deep ocean to the south and a small seamount near 149.5W, 55N that is in
    the shelf depth range but not connected to it
    """
    transform = from_origin(-162., 62., 0.5, 0.5)
    nrows, ncols = 20, 48
    latCell = 62. - 0.5 * (numpy.arange(nrows) + 0.5)
    lonCell = -162. + 0.5 * (numpy.arange(ncols) + 0.5)
    lat = latCell[:, numpy.newaxis] * numpy.ones((1, ncols))
    lon = lonCell[numpy.newaxis, :] * numpy.ones((nrows, 1))

    elevation = DEEP * numpy.ones((nrows, ncols))
    elevation[lat > 60.] = LAND
    shelf = numpy.logical_and(lat > 57., lat < 60.)
    # 0 and -1000 m are both in the shelf depth band
    elevation[numpy.logical_and(shelf, lat > 59.)] = 0.
    elevation[numpy.logical_and(shelf, lat < 59.)] = -200.
    elevation[numpy.logical_and(shelf, lat < 58.)] = -1000.
    # just too deep
    elevation[numpy.logical_and(lat > 56.5, lat < 57.)] = -1000.5
    seamount = numpy.logical_and(numpy.abs(lon + 149.5) < 0.5,
                                 numpy.abs(lat - 55.) < 0.5)
    elevation[seamount] = SEAMOUNT
    return DepthRaster(elevation, transform, CRS)


def make_roms_dataset(nTimes=2):
    """
    A small ROMS-like dataset with three columns of cells in each model
    region, a flat 200 m deep sea floor, a land cell and uniform
    concentrations and temperature
    """
    nEta, nXi, nLevels = 4, 6, 5
    lon1D = numpy.array([-157., -154., -151., -146., -143., -141.])
    lat1D = numpy.linspace(58., 59.5, nEta)
    lon = lon1D[numpy.newaxis, :] * numpy.ones((nEta, 1))
    lat = lat1D[:, numpy.newaxis] * numpy.ones((1, nXi))
    # ROMS longitudes run from 0 to 360
    lon = numpy.mod(lon, 360.)

    s_rho = numpy.linspace(-0.9, -0.1, nLevels)

    ds = xarray.Dataset()
    ds['lon_rho'] = (('eta_rho', 'xi_rho'), lon)
    ds['lat_rho'] = (('eta_rho', 'xi_rho'), lat)
    ds['mask_rho'] = (('eta_rho', 'xi_rho'), numpy.ones((nEta, nXi)))
    ds.mask_rho[0, 0] = 0.
    ds['pm'] = (('eta_rho', 'xi_rho'), 1e-4 * numpy.ones((nEta, nXi)))
    ds['pn'] = (('eta_rho', 'xi_rho'), 1e-4 * numpy.ones((nEta, nXi)))
    ds['h'] = (('eta_rho', 'xi_rho'), 200. * numpy.ones((nEta, nXi)))
    ds['hc'] = 10.
    ds['Vtransform'] = 2
    ds.coords['s_rho'] = ('s_rho', s_rho)
    ds['Cs_r'] = ('s_rho', s_rho)
    ds.coords['ocean_time'] = ('ocean_time', 86400. * numpy.arange(nTimes))

    dims = ('ocean_time', 's_rho', 'eta_rho', 'xi_rho')
    shape = (nTimes, nLevels, nEta, nXi)
    no3 = 2. * numpy.ones(shape)
    no3[1:, ...] = 3.
    ds['NO3'] = (dims, no3)
    ds.NO3.attrs['units'] = 'mmol N m-3'
    ds['temp'] = (dims, 5. * numpy.ones(shape))
    ds.temp.attrs['units'] = 'Celsius'
    return ds


def make_regions():
    return geopandas.GeoDataFrame(
        {'name': ['WGOA', 'EGOA']},
        geometry=[box(-160., 57., -148., 60.), box(-148., 57., -140., 60.)],
        crs=CRS)
