import geopandas
import numpy


def read_statistical_areas(filename, codes, code_field='REP_AREA',
                           class_field=None, class_values=None, logger=None):
    """
    Read NMFS statistical areas from a shapefile, keeping only the given area
    codes and, optionally, the given values of a secondary classification
    attribute

    Parameters
    ----------
    filename : str
        A shapefile (or any other vector file geopandas can read)

    codes : list of int
        The area codes to keep

    code_field : str, optional
        The attribute holding the integer area code

    class_field : str, optional
        An attribute used as a secondary filter.  No secondary filtering is
        done if this is ``None``.

    class_values : list, optional
        The values of ``class_field`` to keep

    logger : logging.Logger, optional
        A logger for the output if not stdout

    Returns
    -------
    areas : geopandas.GeoDataFrame
        The filtered statistical areas
    """
    areas = geopandas.read_file(filename)
    if logger is not None:
        logger.info(f'  Read {len(areas)} statistical areas from {filename}')
    return filter_statistical_areas(areas, codes, code_field=code_field,
                                    class_field=class_field,
                                    class_values=class_values)


def filter_statistical_areas(areas, codes, code_field='REP_AREA',
                             class_field=None, class_values=None):
    """
    Keep only statistical areas with the given codes (and classes)

    Parameters
    ----------
    areas : geopandas.GeoDataFrame
        The statistical areas

    codes : list of int
        The area codes to keep

    code_field : str, optional
        The attribute holding the integer area code

    class_field : str, optional
        An attribute used as a secondary filter

    class_values : list, optional
        The values of ``class_field`` to keep

    Returns
    -------
    areas : geopandas.GeoDataFrame
        The filtered statistical areas, with integer codes
    """
    areas = areas.copy()
    areas[code_field] = areas[code_field].astype(int)
    keep = areas[code_field].isin(list(codes))
    if class_field is not None:
        if class_values is None:
            raise ValueError(f'class_values must be given to filter on '
                             f'{class_field}')
        keep = keep & areas[class_field].isin(list(class_values))

    areas = areas[keep].reset_index(drop=True)
    if len(areas) == 0:
        raise ValueError(f'No statistical areas left after filtering for '
                         f'codes {list(codes)}')
    return areas


def find_duplicate_codes(areas, code_field='REP_AREA'):
    """
    Find area codes shared by more than one polygon

    Parameters
    ----------
    areas : geopandas.GeoDataFrame
        The statistical areas

    code_field : str, optional
        The attribute holding the integer area code

    Returns
    -------
    duplicates : list of int
        The sorted codes that appear more than once
    """
    counts = areas[code_field].value_counts()
    return sorted(int(code) for code in counts[counts > 1].index)


def resolve_duplicate_codes(areas, code_field='REP_AREA', policy=None,
                            area_crs='EPSG:3338', logger=None):
    """
    Decide which polygons to keep when an area code is used more than once.

    The NMFS data has several polygons of different sizes sharing an area code
    (e.g. 650) and whether all of them belong in a model domain is a modeling
    decision.  It therefore has to be made explicitly through ``policy``.

    Parameters
    ----------
    areas : geopandas.GeoDataFrame
        The statistical areas

    code_field : str, optional
        The attribute holding the integer area code

    policy : {None, 'keep_all', 'keep_largest'}, optional
        What to do with duplicates.  ``None`` is only allowed if there are no
        duplicates.

    area_crs : str, optional
        An equal-area CRS used to compare polygon areas for ``keep_largest``

    logger : logging.Logger, optional
        A logger for the output if not stdout

    Returns
    -------
    areas : geopandas.GeoDataFrame
        The statistical areas after applying ``policy``
    """
    duplicates = find_duplicate_codes(areas, code_field)
    if len(duplicates) == 0:
        return areas

    if logger is not None:
        for code in duplicates:
            count = int(numpy.sum(areas[code_field] == code))
            logger.info(f'  Area code {code} is shared by {count} polygons')

    if policy is None:
        raise ValueError(
            f'Area codes {duplicates} are shared by more than one polygon. '
            f'Set duplicate_policy in the [statistical_areas] config section '
            f'to keep_all or keep_largest.')

    if policy == 'keep_all':
        return areas
    elif policy == 'keep_largest':
        area = areas.geometry.to_crs(area_crs).area
        largest = area.groupby(areas[code_field]).idxmax()
        return areas.loc[sorted(largest.values)].reset_index(drop=True)
    else:
        raise ValueError(f'Unknown duplicate policy {policy}')


def get_model_codes(model_codes):
    """
    Flatten a dictionary of model labels and their area codes

    Parameters
    ----------
    model_codes : dict
        Area codes (list of int) for each model label (str)

    Returns
    -------
    codes : list of int
        All area codes, sorted
    """
    codes = []
    for label, label_codes in model_codes.items():
        for code in label_codes:
            if code in codes:
                raise ValueError(f'Area code {code} belongs to more than one '
                                 f'model')
            codes.append(int(code))
    return sorted(codes)


def assign_model_labels(codes, model_codes):
    """
    Look up the Ecopath model each area code belongs to

    Parameters
    ----------
    codes : array-like of int
        The area codes to label

    model_codes : dict
        Area codes (list of int) for each model label (str), e.g.
        ``{'WGOA': [610, 620, 630], 'EGOA': [640, 650]}``

    Returns
    -------
    labels : list of str
        The model label for each code
    """
    lookup = dict()
    for label, label_codes in model_codes.items():
        for code in label_codes:
            lookup[int(code)] = label

    labels = []
    for code in codes:
        code = int(code)
        if code not in lookup:
            raise ValueError(f'Area code {code} does not belong to any model')
        labels.append(lookup[code])
    return labels
