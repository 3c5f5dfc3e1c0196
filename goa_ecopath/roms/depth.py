import xarray


def compute_z_rho(h, s_rho, Cs_r, hc, Vtransform=2, zeta=None):
    """
    Computes the height of ROMS rho points from the terrain-following
    vertical coordinate

    Parameters
    ----------
    h : xarray.DataArray
        The depth of the sea floor (positive) at rho points

    s_rho : xarray.DataArray
        The S-coordinate at the middle of each layer (between -1 and 0)

    Cs_r : xarray.DataArray
        The S-coordinate stretching curve at the middle of each layer

    hc : float
        The critical depth (m) of the S-coordinate

    Vtransform : {1, 2}, optional
        The ROMS vertical transformation equation

    zeta : xarray.DataArray, optional
        The free-surface height, possibly as a function of time.  A flat
        surface at z = 0 is assumed if not supplied.

    Returns
    -------
    z_rho : xarray.DataArray
        The height (m, positive up, negative below the sea surface) of the
        middle of each layer, with the time dimension (if any) first, then
        the vertical dimension, then the horizontal dimensions of ``h``
    """
    if zeta is None:
        zeta = xarray.zeros_like(h)
    hc = float(hc)

    if Vtransform == 1:
        z0 = hc * (s_rho - Cs_r) + Cs_r * h
        z_rho = z0 + zeta * (1. + z0 / h)
    elif Vtransform == 2:
        z0 = (hc * s_rho + Cs_r * h) / (hc + h)
        z_rho = zeta + (zeta + h) * z0
    else:
        raise ValueError(f'Unsupported Vtransform {Vtransform}')

    otherDims = [dim for dim in zeta.dims if dim not in h.dims]
    z_rho = z_rho.transpose(*otherDims, *s_rho.dims, *h.dims)
    z_rho.attrs['units'] = 'meters'
    z_rho.attrs['positive'] = 'up'
    return z_rho


def get_z_rho(dsRoms):
    """
    Get the height of rho points from a ROMS dataset, computing it if the
    dataset doesn't already include ``z_rho``

    Parameters
    ----------
    dsRoms : xarray.Dataset
        ROMS output with either ``z_rho`` or ``h``, ``s_rho``, ``Cs_r`` and
        ``hc`` (and optionally ``Vtransform`` and ``zeta``).  Files without
        ``Vtransform`` use the original transform (1).

    Returns
    -------
    z_rho : xarray.DataArray
        The height (m, positive up) of rho points
    """
    if 'z_rho' in dsRoms:
        return dsRoms.z_rho

    if 'Vtransform' in dsRoms:
        Vtransform = int(dsRoms.Vtransform)
    else:
        Vtransform = 1

    zeta = dsRoms.zeta if 'zeta' in dsRoms else None

    return compute_z_rho(dsRoms.h, dsRoms.s_rho, dsRoms.Cs_r, dsRoms.hc,
                         Vtransform=Vtransform, zeta=zeta)
