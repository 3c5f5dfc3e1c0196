import numpy
from scipy.interpolate import CubicSpline


def resample_profile(depth, values, resolution=1., max_depth=None, top=None,
                     bottom=None):
    """
    Fit a cubic spline through a vertical profile and evaluate it in the
    middle of evenly spaced layers

    Parameters
    ----------
    depth : numpy.ndarray
        The depth (m, positive down) of each sample

    values : numpy.ndarray
        The value of a variable at each sample

    resolution : float, optional
        The thickness (m) of the resampled layers

    max_depth : float, optional
        The deepest depth (m) to resample to

    top, bottom : float, optional
        The depths (m) of the sea surface and the sea floor.  The profile is
        extended to them by holding the shallowest and deepest values
        constant.  By default, the profile runs from the shallowest to the
        deepest sample.

    Returns
    -------
    resampled : tuple of numpy.ndarray or None
        The middle depths, values and thicknesses of the layers, running from
        the top to the bottom of the column (the deepest layer may be
        thinner than ``resolution``).  ``None`` if there are fewer than two
        valid samples or no layers.
    """
    depth = numpy.asarray(depth, dtype=float)
    values = numpy.asarray(values, dtype=float)

    valid = numpy.logical_and(numpy.isfinite(depth), numpy.isfinite(values))
    depth, indices = numpy.unique(depth[valid], return_index=True)
    values = values[valid][indices]
    if len(depth) < 2:
        return None

    if top is not None and numpy.isfinite(top) and top < depth[0]:
        depth = numpy.append(top, depth)
        values = numpy.append(values[0], values)
    if bottom is not None and numpy.isfinite(bottom) and bottom > depth[-1]:
        depth = numpy.append(depth, bottom)
        values = numpy.append(values, values[-1])

    top = depth[0]
    bottom = depth[-1]
    if max_depth is not None:
        bottom = min(bottom, max_depth)
    if bottom <= top:
        return None

    edges = numpy.append(numpy.arange(top, bottom, resolution), bottom)
    thickness = numpy.diff(edges)
    middle = 0.5 * (edges[0:-1] + edges[1:])

    spline = CubicSpline(depth, values)
    return middle, spline(middle), thickness


def integrate_profile(values, thickness):
    """
    The column integral of a resampled profile, e.g. mass per m^2 from a
    concentration per m^3
    """
    return numpy.sum(values * thickness)


def average_profile(values, thickness):
    """ The thickness-weighted mean of a resampled profile """
    return numpy.sum(values * thickness) / numpy.sum(thickness)


def compute_column_statistic(depth, values, method='integrate',
                             resolution=1., max_depth=None,
                             top=None, bottom=None):
    """
    Reduce a vertical profile to one value by resampling it with a cubic
    spline and then integrating or averaging over the water column

    Parameters
    ----------
    depth : numpy.ndarray
        The depth (m, positive down) of each sample

    values : numpy.ndarray
        The value of a variable at each sample

    method : {'integrate', 'average'}, optional
        Whether to integrate (for concentrations) or average (for intensive
        quantities like temperature)

    resolution : float, optional
        The thickness (m) of the resampled layers

    max_depth : float, optional
        The deepest depth (m) to include

    top, bottom : float, optional
        The depths (m) of the sea surface and the sea floor that the profile
        is extended to

    Returns
    -------
    statistic : float
        The column integral or average, ``NaN`` if the profile has fewer than
        two valid samples
    """
    resampled = resample_profile(depth, values, resolution=resolution,
                                 max_depth=max_depth, top=top,
                                 bottom=bottom)
    if resampled is None:
        return numpy.nan

    _, resampledValues, thickness = resampled
    if method == 'integrate':
        return integrate_profile(resampledValues, thickness)
    elif method == 'average':
        return average_profile(resampledValues, thickness)
    else:
        raise ValueError(f'Unknown column method {method}')
