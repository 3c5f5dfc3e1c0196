from goa_ecopath.mask.areas import (
    assign_model_labels as assign_model_labels,
)
from goa_ecopath.mask.areas import (
    read_statistical_areas as read_statistical_areas,
)
from goa_ecopath.mask.areas import (
    resolve_duplicate_codes as resolve_duplicate_codes,
)
from goa_ecopath.mask.bathymetry import DepthRaster as DepthRaster
from goa_ecopath.mask.bathymetry import (
    read_depth_raster as read_depth_raster,
)
from goa_ecopath.mask.build import (
    build_ecopath_masks as build_ecopath_masks,
)
from goa_ecopath.mask.build import partition_masks as partition_masks
from goa_ecopath.mask.build import write_masks as write_masks
from goa_ecopath.mask.shelf import select_shelf as select_shelf
