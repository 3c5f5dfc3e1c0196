import numpy as np
import xarray as xr

from goa_ecopath.io import write_netcdf


def test_write_netcdf_int64_conversion_and_attr(tmp_path):
    arr = np.array([1, 2, 3], dtype=np.int64)
    ds = xr.Dataset({'nCells': (('nRegions',), arr)})
    ds['nCells'].attrs['long_name'] = 'cells in each region'
    out_file = tmp_path / 'test_int64.nc'
    write_netcdf(ds, str(out_file))
    ds2 = xr.open_dataset(out_file)
    assert ds2['nCells'].dtype == np.int32
    assert ds2['nCells'].attrs['long_name'] == 'cells in each region'
    assert 'history' in ds2.attrs
    ds2.close()


def test_write_netcdf_fill_value(tmp_path):
    arr = np.array([1.0, np.nan, 3.0], dtype=np.float32)
    ds = xr.Dataset({'NO3': (('nRegions',), arr)})
    out_file = tmp_path / 'test_fill.nc'
    write_netcdf(ds, str(out_file))
    ds2 = xr.open_dataset(out_file)
    assert ds2['NO3'].encoding.get('_FillValue', None) is not None
    assert np.isnan(ds2['NO3'].values[1])
    ds2.close()


def test_write_netcdf_strings(tmp_path):
    ds = xr.Dataset({'regionNames': (('nRegions',),
                                     np.array(['WGOA', 'EGOA']))})
    out_file = tmp_path / 'test_strings.nc'
    write_netcdf(ds, str(out_file), char_dim_name='CustomStrLen')
    ds2 = xr.open_dataset(out_file)
    names = [name.decode('utf-8') if isinstance(name, bytes) else str(name)
             for name in ds2['regionNames'].values]
    assert names == ['WGOA', 'EGOA']
    ds2.close()
