import sys
from datetime import datetime

import netCDF4
import numpy

default_format = 'NETCDF4'
default_engine = None
default_char_dim_name = 'StrLen'
default_fills = netCDF4.default_fillvals
default_nchar = 64


def write_netcdf(ds, fileName, fillValues=None, format=None, engine=None,
                 char_dim_name=None, nchar=None):
    """
    Write an xarray.Dataset to a file with NetCDF4 fill values and fixed-width
    strings.  The time and command line are prepended to the ``history``
    attribute.

    Parameters
    ----------
    ds : xarray.Dataset
        The dataset to save

    fileName : str
        The path for the NetCDF file to write

    fillValues : dict, optional
        A dictionary of fill values for different NetCDF types.  Default is
        ``goa_ecopath.io.default_fills``, which defaults to
        ``netCDF4.default_fillvals``

    format : {'NETCDF4', 'NETCDF4_CLASSIC', 'NETCDF3_64BIT', 'NETCDF3_CLASSIC'}, optional
        The NetCDF file format to use.  Default is
        ``goa_ecopath.io.default_format``

    engine : {'netcdf4', 'scipy', 'h5netcdf'}, optional
        The library to use for NetCDF output.  The default is the same as
        in :py:meth:`xarray.Dataset.to_netcdf` and depends on ``format``.

    char_dim_name : str, optional
        The name of the dimension used for character strings. Default is
        ``goa_ecopath.io.default_char_dim_name``

    nchar : int, optional
        The number of characters in string variables.  Default is
        ``goa_ecopath.io.default_nchar``
    """  # noqa: E501
    if format is None:
        format = default_format

    if fillValues is None:
        fillValues = default_fills

    if engine is None:
        engine = default_engine

    if char_dim_name is None:
        char_dim_name = default_char_dim_name

    if nchar is None:
        nchar = default_nchar

    numpyFillValues = {}
    for fillType in fillValues:
        # string fill values have no numpy counterpart
        if not fillType.startswith('S'):
            numpyFillValues[numpy.dtype(fillType)] = fillValues[fillType]

    encodingDict = {}
    variableNames = list(ds.data_vars.keys()) + list(ds.coords.keys())
    for variableName in variableNames:
        var = ds[variableName]
        encodingDict[variableName] = {}
        dtype = var.dtype

        if dtype == numpy.int64:
            encodingDict[variableName]['dtype'] = 'int32'

        if dtype in numpyFillValues:
            if numpy.issubdtype(dtype, numpy.floating) and \
                    bool(numpy.any(numpy.isnan(var.values))):
                fill = numpyFillValues[dtype]
            else:
                fill = None
            encodingDict[variableName]['_FillValue'] = fill

        isString = numpy.issubdtype(dtype, numpy.bytes_) or \
            numpy.issubdtype(dtype, numpy.str_)
        if isString:
            encodingDict[variableName].update(
                {'dtype': f'|S{nchar}', 'char_dim_name': char_dim_name})

    update_history(ds)

    ds.to_netcdf(fileName, encoding=encodingDict, format=format,
                 engine=engine)


def update_history(ds):
    """Add or append history to attributes of a data set"""

    thiscommand = datetime.now().strftime('%a %b %d %H:%M:%S %Y') + ': ' + \
        ' '.join(sys.argv[:])
    if 'history' in ds.attrs:
        newhist = '\n'.join([thiscommand, ds.attrs['history']])
    else:
        newhist = thiscommand
    ds.attrs['history'] = newhist
