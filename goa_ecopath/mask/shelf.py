import geopandas
import numpy
import rasterio.features
import shapely.geometry
import shapely.ops
from shapely.geometry import GeometryCollection, MultiPolygon, Polygon


def polygonize(labels, valid, transform, connectivity=4):
    """
    Convert labeled raster cells to polygons, dissolving neighboring cells
    with the same label.  The result follows cell edges; it is not smoothed.

    Parameters
    ----------
    labels : numpy.ndarray
        An integer array of cell labels

    valid : numpy.ndarray
        A boolean array, ``True`` for cells to include

    transform : affine.Affine
        The transform of the raster

    connectivity : {4, 8}, optional
        Whether cells touching only at corners belong to the same region

    Returns
    -------
    geometry : shapely.geometry.base.BaseGeometry
        The dissolved (multi)polygon, empty if no cell is valid
    """
    polygons = [shapely.geometry.shape(geometry) for geometry, _ in
                rasterio.features.shapes(labels, mask=valid,
                                         connectivity=connectivity,
                                         transform=transform)]
    if len(polygons) == 0:
        return Polygon()
    return shapely.ops.unary_union(polygons)


def split_components(geometry):
    """
    Split a (multi)polygon into its disjoint polygons

    Parameters
    ----------
    geometry : shapely.geometry.base.BaseGeometry
        A polygon, multipolygon or collection

    Returns
    -------
    components : list of shapely.geometry.Polygon
        The non-empty polygons making up ``geometry``
    """
    if geometry.is_empty:
        return []
    if isinstance(geometry, Polygon):
        return [geometry]
    components = []
    for part in getattr(geometry, 'geoms', []):
        # lines and points left over from overlays have no area
        if isinstance(part, (Polygon, MultiPolygon, GeometryCollection)):
            components.extend(split_components(part))
    return components


def select_shelf(components, crs, rule='largest', area_crs='EPSG:3338',
                 land=None, max_coast_distance=10e3, ambiguity_ratio=0.5,
                 allow_ambiguous=False, logger=None):
    """
    Pick the component of the depth-band polygons that is the continental
    shelf, as opposed to isolated features such as seamounts

    Parameters
    ----------
    components : list of shapely.geometry.Polygon
        Disjoint polygons of the depth band

    crs : str or pyproj.CRS
        The CRS of ``components`` (and ``land``)

    rule : {'largest', 'coastal'}, optional
        ``'largest'`` picks the component with the largest area.
        ``'coastal'`` picks the largest component within
        ``max_coast_distance`` of ``land``.

    area_crs : str, optional
        An equal-area CRS in meters for computing areas and distances

    land : shapely.geometry.base.BaseGeometry, optional
        Land polygons, required for the ``'coastal'`` rule

    max_coast_distance : float, optional
        The maximum distance (m) from land of a candidate for the
        ``'coastal'`` rule

    ambiguity_ratio : float, optional
        If the second-largest candidate has at least this fraction of the
        area of the selected one, the selection is ambiguous

    allow_ambiguous : bool, optional
        Whether to return the largest candidate of an ambiguous selection
        (with a warning) instead of raising an exception

    logger : logging.Logger, optional
        A logger for the output if not stdout

    Returns
    -------
    shelf : shapely.geometry.Polygon
        The selected component
    """
    if len(components) == 0:
        raise ValueError('There are no depth-band polygons to select the '
                         'shelf from')

    projected = geopandas.GeoSeries(components, crs=crs).to_crs(area_crs)
    areas = projected.area.values
    candidates = numpy.arange(len(components))

    if rule == 'coastal':
        if land is None or land.is_empty:
            raise ValueError('The coastal shelf selection rule requires land '
                             'polygons')
        projectedLand = geopandas.GeoSeries([land], crs=crs).to_crs(
            area_crs).iloc[0]
        distance = projected.distance(projectedLand).values
        candidates = candidates[distance <= max_coast_distance]
        if len(candidates) == 0:
            raise ValueError(f'No depth-band polygon is within '
                             f'{max_coast_distance} m of land')
    elif rule != 'largest':
        raise ValueError(f'Unknown shelf selection rule {rule}')

    order = candidates[numpy.argsort(-areas[candidates], kind='stable')]
    selected = order[0]

    if logger is not None:
        logger.info(f'  Selected shelf polygon with area '
                    f'{1e-6 * areas[selected]:.1f} km^2 out of '
                    f'{len(components)} polygon(s) ({len(candidates)} '
                    f'candidate(s))')

    if len(order) > 1:
        ratio = areas[order[1]] / areas[selected]
        if ratio >= ambiguity_ratio:
            message = f'Shelf selection is ambiguous: the runner-up polygon ' \
                      f'has {100. * ratio:.1f}% of the area of the selected ' \
                      f'one'
            if logger is not None:
                logger.warning(message)
            if not allow_ambiguous:
                raise ValueError(message)

    return components[selected]
