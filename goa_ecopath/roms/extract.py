"""
Extract depth-integrated and depth-averaged ROMS-NPZ variables on the
Ecopath model masks
"""

import argparse
import os

import geopandas
import numpy
import progressbar
import shapely
import shapely.ops
import xarray
from shapely.strtree import STRtree

from goa_ecopath.config import get_config
from goa_ecopath.io import write_netcdf
from goa_ecopath.logging import LoggingContext
from goa_ecopath.roms.depth import get_z_rho
from goa_ecopath.roms.vertical import compute_column_statistic


def read_ecopath_masks(directory, labels, crs='EPSG:4326'):
    """
    Read the mask shapefiles written by ``build_ecopath_masks`` and dissolve
    them into one region per model

    Parameters
    ----------
    directory : str
        The directory with a ``<label>.shp`` file for each model

    labels : list of str
        The model labels

    crs : str, optional
        The CRS of the regions, which must match the ROMS longitude and
        latitude

    Returns
    -------
    regions : geopandas.GeoDataFrame
        A ``name`` and a dissolved geometry for each model
    """
    geometries = []
    for label in labels:
        masks = geopandas.read_file(os.path.join(directory, f'{label}.shp'))
        masks = masks.to_crs(crs)
        geometries.append(shapely.ops.unary_union(list(masks.geometry)))
    return geopandas.GeoDataFrame({'name': list(labels)},
                                  geometry=geometries, crs=crs)


def compute_region_cell_masks(lon, lat, regions, ocean_mask=None):
    """
    Find the grid cells with centers in each region

    Parameters
    ----------
    lon, lat : numpy.ndarray
        The longitude and latitude (degrees) of cell centers

    regions : geopandas.GeoDataFrame
        Region polygons in longitude and latitude, with longitude between
        -180 and 180

    ocean_mask : numpy.ndarray, optional
        Zero for land cells, which are excluded from all regions

    Returns
    -------
    masks : numpy.ndarray
        A boolean array with a leading region dimension followed by the
        dimensions of ``lon``
    """
    lon = numpy.asarray(lon, dtype=float)
    lat = numpy.asarray(lat, dtype=float)

    # transform longitudes to [-180, 180)
    lon = numpy.mod(lon + 180., 360.) - 180.

    points = shapely.points(lon.ravel(), lat.ravel())
    tree = STRtree(points)
    masks = numpy.zeros((len(regions), points.size), dtype=bool)
    for index, geometry in enumerate(regions.geometry):
        indicesInRegion = tree.query(geometry, predicate='covers')
        masks[index, indicesInRegion] = True

    if ocean_mask is not None:
        isOcean = numpy.asarray(ocean_mask).ravel() != 0
        masks = numpy.logical_and(masks, isOcean)

    return masks.reshape((len(regions),) + lon.shape)


def aggregate_cells(values, weights=None, aggregation='area_weighted_mean'):
    """
    Combine cell values into one value, skipping cells that are ``NaN``

    Parameters
    ----------
    values : numpy.ndarray
        Cell values with cells along the last axis

    weights : numpy.ndarray, optional
        The area of each cell, used for ``'area_weighted_mean'``

    aggregation : {'mean', 'area_weighted_mean'}, optional
        How to combine cells

    Returns
    -------
    aggregated : numpy.ndarray
        The combined values, with the last axis removed.  ``NaN`` where no
        cell is valid.
    """
    values = numpy.asarray(values, dtype=float)
    if aggregation not in ['mean', 'area_weighted_mean']:
        raise ValueError(f'Unknown aggregation {aggregation}')
    if aggregation == 'mean' or weights is None:
        weights = numpy.ones(values.shape[-1])

    valid = numpy.isfinite(values)
    weights = numpy.where(valid, weights, 0.)
    weightedSum = numpy.where(valid, values, 0.) * weights
    totalWeight = numpy.sum(weights, axis=-1)
    with numpy.errstate(invalid='ignore', divide='ignore'):
        aggregated = numpy.sum(weightedSum, axis=-1) / totalWeight
    return numpy.where(totalWeight > 0., aggregated, numpy.nan)


def extract_ecopath_variables(dsRoms, regions, integrated_variables,
                              averaged_variables, resolution=1.,
                              max_depth=None,
                              aggregation='area_weighted_mean',
                              time_dim='ocean_time', time_mean=False,
                              show_progress=False, logger=None):
    """
    Compute a depth-integrated or depth-averaged value for each ROMS
    variable in each grid cell of each region, then combine the cells of
    each region

    Parameters
    ----------
    dsRoms : xarray.Dataset
        ROMS output on rho points with ``lon_rho``, ``lat_rho``, the vertical
        coordinate (see :py:func:`goa_ecopath.roms.depth.get_z_rho()`) and
        optionally ``mask_rho``, ``pm`` and ``pn``.  Each column runs from the
        free surface (``zeta``, or 0 if absent) to the sea floor (``h``)

    regions : geopandas.GeoDataFrame
        A ``name`` and a geometry (in longitude and latitude) for each region

    integrated_variables : list of str
        Concentrations to integrate over the water column

    averaged_variables : list of str
        Intensive quantities to average over the water column

    resolution : float, optional
        The thickness (m) of layers the spline is resampled to

    max_depth : float, optional
        The deepest depth (m) to include in each column

    aggregation : {'mean', 'area_weighted_mean'}, optional
        How to combine cells in a region.  The area of each cell is
        ``1/(pm*pn)`` if available; otherwise all cells count equally.

    time_dim : str, optional
        The name of the time dimension

    time_mean : bool, optional
        Whether to average over time before computing column values

    show_progress : bool, optional
        Whether to show a progress bar

    logger : logging.Logger, optional
        A logger for the output if not stdout

    Returns
    -------
    dsSummary : xarray.Dataset
        ``regionNames``, ``nCells`` and one variable per ROMS variable, with
        dimension ``nRegions`` (and ``time_dim`` unless averaged over time)
    """
    methods = dict()
    for varName in integrated_variables:
        methods[varName] = 'integrate'
    for varName in averaged_variables:
        if varName in methods:
            raise ValueError(f'{varName} is both an integrated and an '
                             f'averaged variable')
        methods[varName] = 'average'

    missing = [varName for varName in methods if varName not in dsRoms]
    if len(missing) > 0:
        raise ValueError(f'Variables {missing} are not in the ROMS output')

    if aggregation not in ['mean', 'area_weighted_mean']:
        raise ValueError(f'Unknown aggregation {aggregation}')

    if time_mean and time_dim in dsRoms.dims:
        dsRoms = dsRoms.mean(dim=time_dim, keep_attrs=True)

    hasTime = time_dim in dsRoms.dims
    nTimes = dsRoms.sizes[time_dim] if hasTime else 1

    z = get_z_rho(dsRoms)
    horizDims = dsRoms.lon_rho.dims
    vertDim = [dim for dim in z.dims if dim != time_dim and
               dim not in horizDims][0]
    depth = -_to_columns(z, time_dim, vertDim, horizDims)
    surface, floor = _get_column_limits(dsRoms, time_dim, horizDims)

    oceanMask = dsRoms.mask_rho.values if 'mask_rho' in dsRoms else None
    cellMasks = compute_region_cell_masks(dsRoms.lon_rho.values,
                                          dsRoms.lat_rho.values, regions,
                                          ocean_mask=oceanMask)
    nRegions = cellMasks.shape[0]
    cellMasks = cellMasks.reshape((nRegions, -1))
    cellIndices = numpy.nonzero(numpy.any(cellMasks, axis=0))[0]
    nCells = cellMasks.shape[1]

    if 'pm' in dsRoms and 'pn' in dsRoms:
        cellArea = (1. / (dsRoms.pm * dsRoms.pn)).values.ravel()
    else:
        cellArea = None

    if logger is not None:
        for name, mask in zip(regions['name'], cellMasks):
            logger.info(f'  {name}: {numpy.count_nonzero(mask)} cells')

    dsSummary = xarray.Dataset()
    dsSummary['regionNames'] = (('nRegions',),
                                numpy.array(list(regions['name']), dtype=str))
    dsSummary['nCells'] = (('nRegions',),
                           numpy.count_nonzero(cellMasks, axis=1))

    for varName, method in methods.items():
        if logger is not None:
            logger.info(f'  {varName} (depth {method}d)')
        var = dsRoms[varName]
        if vertDim not in var.dims:
            raise ValueError(f'{varName} does not have vertical dimension '
                             f'{vertDim}')
        data = _to_columns(var, time_dim, vertDim, horizDims)

        columnValues = numpy.full((nTimes, nCells), numpy.nan)
        bar = _start_progress(len(cellIndices)) if show_progress else None
        for count, iCell in enumerate(cellIndices):
            for iTime in range(nTimes):
                # depth is time independent without a time-varying zeta
                zTime = min(iTime, depth.shape[0] - 1)
                dataTime = min(iTime, data.shape[0] - 1)
                top = surface[min(iTime, surface.shape[0] - 1), iCell]
                bottom = None if floor is None else floor[iCell]
                columnValues[iTime, iCell] = compute_column_statistic(
                    depth[zTime, :, iCell], data[dataTime, :, iCell],
                    method=method, resolution=resolution,
                    max_depth=max_depth, top=top, bottom=bottom)
            if bar is not None:
                bar.update(count + 1)
        if bar is not None:
            bar.finish()

        summary = numpy.zeros((nRegions, nTimes))
        for iRegion in range(nRegions):
            inRegion = cellMasks[iRegion, :]
            weights = None if cellArea is None else cellArea[inRegion]
            summary[iRegion, :] = aggregate_cells(
                columnValues[:, inRegion], weights, aggregation=aggregation)

        if hasTime:
            dsSummary[varName] = (('nRegions', time_dim), summary)
        else:
            dsSummary[varName] = (('nRegions',), summary[:, 0])
        dsSummary[varName].attrs = _get_summary_attrs(var.attrs, method)

    if hasTime and time_dim in dsRoms.coords:
        dsSummary.coords[time_dim] = dsRoms[time_dim]

    dsSummary.attrs['vertical_resolution'] = resolution
    dsSummary.attrs['aggregation'] = aggregation
    if max_depth is not None:
        dsSummary.attrs['max_depth'] = max_depth

    return dsSummary


def write_summary_table(dsSummary, fileName):
    """
    Write the region summary as a CSV table with one row per region (and
    time) and one column per variable

    Parameters
    ----------
    dsSummary : xarray.Dataset
        The output of :py:func:`extract_ecopath_variables()`

    fileName : str
        The CSV file to write
    """
    names = [name.decode('utf-8') if isinstance(name, bytes) else str(name)
             for name in dsSummary.regionNames.values]
    ds = dsSummary.drop_vars('regionNames')
    ds = ds.rename_dims({'nRegions': 'region'})
    ds.coords['region'] = ('region', names)
    ds.to_dataframe().to_csv(fileName)


def extract_from_config(config, roms_filename, out_prefix, logger=None):
    """
    Extract the ROMS variables named in the config options on the masks and
    write the summary as NetCDF and CSV

    Parameters
    ----------
    config : goa_ecopath.config.EcopathConfigParser
        Config options

    roms_filename : str
        A ROMS output file

    out_prefix : str
        The prefix of the ``.nc`` and ``.csv`` files to write

    logger : logging.Logger, optional
        A logger for the output if not stdout

    Returns
    -------
    dsSummary : xarray.Dataset
        The region summary
    """
    section = 'roms'
    mask_directory = config.get('output', 'directory')
    labels = list(config.getexpression('ecopath_models', 'model_codes'))

    if logger is not None:
        logger.info(f'Reading masks from {mask_directory}...')
    regions = read_ecopath_masks(mask_directory, labels)

    if logger is not None:
        logger.info(f'Extracting variables from {roms_filename}...')
    dsRoms = xarray.open_dataset(roms_filename)
    dsSummary = extract_ecopath_variables(
        dsRoms, regions,
        integrated_variables=config.getexpression(section,
                                                  'integrated_variables'),
        averaged_variables=config.getexpression(section,
                                                'averaged_variables'),
        resolution=config.getfloat(section, 'resolution'),
        max_depth=config.getoptional(section, 'max_depth', dtype=float),
        aggregation=config.get(section, 'aggregation'),
        time_dim=config.get(section, 'time_dim'),
        time_mean=config.getboolean(section, 'time_mean'),
        show_progress=config.getboolean(section, 'show_progress'),
        logger=logger)
    dsRoms.close()

    write_netcdf(dsSummary, f'{out_prefix}.nc')
    write_summary_table(dsSummary, f'{out_prefix}.csv')
    if logger is not None:
        logger.info(f'Wrote {out_prefix}.nc and {out_prefix}.csv')

    return dsSummary


def main():
    parser = argparse.ArgumentParser(
        description=__doc__, formatter_class=argparse.RawTextHelpFormatter)
    parser.add_argument('-i', '--roms_file', dest='roms_file', type=str,
                        required=True, help='A ROMS-NPZ output file')
    parser.add_argument('-m', '--mask_dir', dest='mask_dir', type=str,
                        help='The directory with the Ecopath mask '
                             'shapefiles.  Default is the output directory '
                             'in the config options')
    parser.add_argument('-o', '--out_prefix', dest='out_prefix', type=str,
                        default='ecopath_roms_summary',
                        help='The prefix for the output .nc and .csv files')
    parser.add_argument('-c', '--config', dest='config_files', nargs='+',
                        help='User config file(s) with options that override '
                             'the defaults')
    parser.add_argument('--log', dest='log_filename', type=str,
                        help='A log file to write output to instead of '
                             'stdout')
    args = parser.parse_args()

    config = get_config(args.config_files)
    if args.mask_dir is not None:
        config.set('output', 'directory', args.mask_dir, user=True)

    with LoggingContext('extract_ecopath_variables',
                        log_filename=args.log_filename) as logger:
        extract_from_config(config, args.roms_file, args.out_prefix,
                            logger=logger)


def _to_columns(da, time_dim, vert_dim, horiz_dims):
    """
    Get the values of a data array as a (time, vertical, cell) numpy array,
    with a time dimension of length 1 if ``da`` has no time dimension
    """
    if time_dim in da.dims:
        da = da.transpose(time_dim, vert_dim, *horiz_dims)
        values = da.values
    else:
        da = da.transpose(vert_dim, *horiz_dims)
        values = da.values[numpy.newaxis, ...]
    return values.reshape(values.shape[0:2] + (-1,))


def _get_summary_attrs(attrs, method):
    summaryAttrs = dict()
    if 'long_name' in attrs:
        summaryAttrs['long_name'] = attrs['long_name']
    if method == 'integrate':
        summaryAttrs['vertical_statistic'] = 'depth integrated'
        if 'units' in attrs:
            summaryAttrs['units'] = f'({attrs["units"]}) m'
    else:
        summaryAttrs['vertical_statistic'] = 'depth averaged'
        if 'units' in attrs:
            summaryAttrs['units'] = attrs['units']
    return summaryAttrs


def _start_progress(count):
    widgets = ['    ', progressbar.Percentage(), ' ', progressbar.Bar(), ' ',
               progressbar.ETA()]
    return progressbar.ProgressBar(widgets=widgets, max_value=count).start()


def _get_column_limits(dsRoms, time_dim, horiz_dims):
    """
    Get the depth (m, positive down) of the sea surface as a (time, cell)
    array and of the sea floor of each cell (``None`` without ``h``)
    """
    if 'zeta' in dsRoms:
        zeta = dsRoms.zeta
        if time_dim in zeta.dims:
            values = zeta.transpose(time_dim, *horiz_dims).values
        else:
            values = zeta.transpose(*horiz_dims).values[numpy.newaxis, ...]
        surface = -values.reshape((values.shape[0], -1))
    else:
        surface = numpy.zeros((1, dsRoms.lon_rho.size))

    if 'h' in dsRoms:
        floor = dsRoms.h.transpose(*horiz_dims).values.ravel()
    else:
        floor = None
    return surface, floor
