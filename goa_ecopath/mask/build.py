"""
Build the Ecopath model-domain masks for the Gulf of Alaska from NMFS
statistical areas and a bathymetry raster
"""

import argparse
import os

import geopandas
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt  # noqa: E402
import numpy
import shapely.ops
from shapely.geometry import MultiPolygon, Polygon

from goa_ecopath.config import get_config
from goa_ecopath.logging import LoggingContext
from goa_ecopath.mask.areas import assign_model_labels, get_model_codes, \
    read_statistical_areas, resolve_duplicate_codes
from goa_ecopath.mask.bathymetry import crop_raster, filter_depth_band, \
    find_land, mask_raster, read_depth_raster, reclassify
from goa_ecopath.mask.shelf import polygonize, select_shelf, \
    split_components


def build_ecopath_masks(areas, raster, model_codes, code_field='REP_AREA',
                        min_elevation=-1000., max_elevation=0., label=1,
                        selection='largest', area_crs='EPSG:3338',
                        max_coast_distance=10e3, ambiguity_ratio=0.5,
                        allow_ambiguous=False, output_code_field='AREA_CODE',
                        output_label_field='MODEL', logger=None):
    """
    Intersect the continental shelf, as defined by an elevation band, with
    the statistical areas of each Ecopath model

    Parameters
    ----------
    areas : geopandas.GeoDataFrame
        The statistical areas making up the models, already filtered

    raster : goa_ecopath.mask.bathymetry.DepthRaster
        Elevation covering the statistical areas

    model_codes : dict
        Area codes (list of int) for each model label (str)

    code_field : str, optional
        The attribute of ``areas`` holding the integer area code

    min_elevation, max_elevation : float, optional
        The inclusive elevation band (m) of the shelf

    label : int, optional
        The label given to cells in the band before polygonizing

    selection : {'largest', 'coastal'}, optional
        The rule for picking the shelf out of the depth-band polygons, see
        :py:func:`goa_ecopath.mask.shelf.select_shelf()`

    area_crs : str, optional
        An equal-area CRS in meters for computing areas and distances

    max_coast_distance : float, optional
        The maximum distance (m) from land for the ``'coastal'`` rule

    ambiguity_ratio : float, optional
        The runner-up to selected area ratio that makes the selection
        ambiguous

    allow_ambiguous : bool, optional
        Whether to go ahead with an ambiguous selection

    output_code_field, output_label_field : str, optional
        The names of the area code and model label attributes of the masks

    logger : logging.Logger, optional
        A logger for the output if not stdout

    Returns
    -------
    masks : geopandas.GeoDataFrame
        One polygon per statistical area that overlaps the shelf, labeled with
        its area code and model, in the CRS of ``areas``
    """
    areasOnRaster = areas.to_crs(raster.crs)

    if logger is not None:
        logger.info('  Cropping and masking bathymetry...')
    cropped = crop_raster(raster, areasOnRaster.total_bounds)
    masked = mask_raster(cropped, list(areasOnRaster.geometry))
    inBand = filter_depth_band(masked, min_elevation, max_elevation)
    labels, valid = reclassify(inBand, label)
    if logger is not None:
        logger.info(f'  {numpy.count_nonzero(valid)} cells between '
                    f'{min_elevation} and {max_elevation} m')

    if logger is not None:
        logger.info('  Converting cells to polygons...')
    components = split_components(polygonize(labels, valid,
                                             cropped.transform))

    land = None
    if selection == 'coastal':
        isLand = find_land(cropped, max_elevation)
        land = polygonize(isLand.astype(numpy.int32), isLand,
                          cropped.transform)

    shelf = select_shelf(components, crs=raster.crs, rule=selection,
                         area_crs=area_crs, land=land,
                         max_coast_distance=max_coast_distance,
                         ambiguity_ratio=ambiguity_ratio,
                         allow_ambiguous=allow_ambiguous, logger=logger)

    masks = intersect_shelf(areasOnRaster, shelf, model_codes,
                            code_field=code_field,
                            output_code_field=output_code_field,
                            output_label_field=output_label_field)
    if logger is not None:
        logger.info(f'  {len(masks)} statistical areas overlap the shelf')

    return masks.to_crs(areas.crs)


def intersect_shelf(areas, shelf, model_codes, code_field='REP_AREA',
                    output_code_field='AREA_CODE',
                    output_label_field='MODEL'):
    """
    Intersect each statistical area with the shelf and label the result with
    the model the area belongs to

    Parameters
    ----------
    areas : geopandas.GeoDataFrame
        The statistical areas

    shelf : shapely.geometry.Polygon
        The shelf, in the CRS of ``areas``

    model_codes : dict
        Area codes (list of int) for each model label (str)

    code_field : str, optional
        The attribute of ``areas`` holding the integer area code

    output_code_field, output_label_field : str, optional
        The names of the area code and model label attributes of the result

    Returns
    -------
    masks : geopandas.GeoDataFrame
        The non-empty intersections
    """
    codes = []
    geometries = []
    for code, geometry in zip(areas[code_field], areas.geometry):
        intersection = _polygonal(geometry.intersection(shelf))
        if intersection.is_empty or intersection.area == 0.:
            continue
        codes.append(int(code))
        geometries.append(intersection)

    labels = assign_model_labels(codes, model_codes)
    return geopandas.GeoDataFrame(
        {output_code_field: numpy.array(codes, dtype=int),
         output_label_field: labels},
        geometry=geometries, crs=areas.crs)


def partition_masks(masks, label_field='MODEL'):
    """
    Split the masks by model label

    Parameters
    ----------
    masks : geopandas.GeoDataFrame
        The labeled masks

    label_field : str, optional
        The attribute holding the model label

    Returns
    -------
    partitions : dict
        The masks (geopandas.GeoDataFrame) for each model label
    """
    partitions = dict()
    for label in sorted(masks[label_field].unique()):
        partitions[label] = \
            masks[masks[label_field] == label].reset_index(drop=True)
    return partitions


def write_masks(partitions, directory, logger=None):
    """
    Write one shapefile per model label

    Parameters
    ----------
    partitions : dict
        The masks (geopandas.GeoDataFrame) for each model label

    directory : str
        The directory to write ``<label>.shp`` files to

    logger : logging.Logger, optional
        A logger for the output if not stdout

    Returns
    -------
    filenames : dict
        The shapefile written for each model label
    """
    os.makedirs(directory, exist_ok=True)
    filenames = dict()
    for label, masks in partitions.items():
        filename = os.path.join(directory, f'{label}.shp')
        masks.to_file(filename)
        filenames[label] = filename
        if logger is not None:
            logger.info(f'  Wrote {filename}')
    return filenames


def plot_masks(masks, filename, label_field='MODEL', dpi=200):
    """
    Plot the masks, colored by model label, to an image file

    Parameters
    ----------
    masks : geopandas.GeoDataFrame
        The labeled masks

    filename : str
        The image file to write

    label_field : str, optional
        The attribute holding the model label

    dpi : int, optional
        The resolution of the image
    """
    fig, ax = plt.subplots(figsize=(10, 5))
    masks.plot(ax=ax, column=label_field, categorical=True, legend=True,
               edgecolor='k', linewidth=0.3)
    ax.set_title('Ecopath model masks')
    plt.savefig(filename, dpi=dpi, bbox_inches='tight')
    plt.close(fig)


def build_masks_from_config(config, logger=None):
    """
    Read the inputs named in the config options, build the masks and write
    them out

    Parameters
    ----------
    config : goa_ecopath.config.EcopathConfigParser
        Config options

    logger : logging.Logger, optional
        A logger for the output if not stdout

    Returns
    -------
    filenames : dict
        The shapefile written for each model label
    """
    section = 'statistical_areas'
    model_codes = config.getexpression('ecopath_models', 'model_codes')
    code_field = config.get(section, 'code_field')
    class_field = config.getoptional(section, 'class_field')
    class_values = None
    if class_field is not None:
        class_values = config.getexpression(section, 'class_values')
    area_crs = config.get('shelf', 'area_crs')

    if logger is not None:
        logger.info('Reading statistical areas...')
    areas = read_statistical_areas(
        config.get(section, 'filename'), get_model_codes(model_codes),
        code_field=code_field, class_field=class_field,
        class_values=class_values, logger=logger)
    areas = resolve_duplicate_codes(
        areas, code_field=code_field,
        policy=config.getoptional(section, 'duplicate_policy'),
        area_crs=area_crs, logger=logger)

    if logger is not None:
        logger.info('Reading bathymetry...')
    raster = read_depth_raster(config.get('bathymetry', 'filename'),
                               bounds=tuple(areas.total_bounds),
                               bounds_crs=areas.crs, logger=logger)

    if logger is not None:
        logger.info('Building masks...')
    output_label_field = config.get('output', 'label_field')
    masks = build_ecopath_masks(
        areas, raster, model_codes, code_field=code_field,
        min_elevation=config.getfloat('bathymetry', 'min_elevation'),
        max_elevation=config.getfloat('bathymetry', 'max_elevation'),
        label=config.getint('bathymetry', 'label'),
        selection=config.get('shelf', 'selection'),
        area_crs=area_crs,
        max_coast_distance=config.getfloat('shelf', 'max_coast_distance'),
        ambiguity_ratio=config.getfloat('shelf', 'ambiguity_ratio'),
        allow_ambiguous=config.getboolean('shelf', 'allow_ambiguous'),
        output_code_field=config.get('output', 'code_field'),
        output_label_field=output_label_field, logger=logger)

    directory = config.get('output', 'directory')
    filenames = write_masks(partition_masks(masks, output_label_field),
                            directory, logger=logger)

    if config.getboolean('output', 'plot'):
        plot_masks(masks, os.path.join(directory, 'masks.png'),
                   label_field=output_label_field)

    with open(os.path.join(directory, 'build_ecopath_masks.cfg'), 'w') as fp:
        config.write(fp)

    return filenames


def main():
    parser = argparse.ArgumentParser(
        description=__doc__, formatter_class=argparse.RawTextHelpFormatter)
    parser.add_argument('-c', '--config', dest='config_files', nargs='+',
                        help='User config file(s) with options that override '
                             'the defaults')
    parser.add_argument('--log', dest='log_filename', type=str,
                        help='A log file to write output to instead of '
                             'stdout')
    args = parser.parse_args()

    config = get_config(args.config_files)
    with LoggingContext('build_ecopath_masks',
                        log_filename=args.log_filename) as logger:
        build_masks_from_config(config, logger=logger)


def _polygonal(geometry):
    """ The polygons that make up a geometry, dropping lines and points """
    if isinstance(geometry, (Polygon, MultiPolygon)):
        return geometry
    components = split_components(geometry)
    if len(components) == 0:
        return Polygon()
    return shapely.ops.unary_union(components)
