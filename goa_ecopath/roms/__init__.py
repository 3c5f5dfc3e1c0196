from goa_ecopath.roms.depth import compute_z_rho as compute_z_rho
from goa_ecopath.roms.extract import (
    extract_ecopath_variables as extract_ecopath_variables,
)
from goa_ecopath.roms.extract import (
    read_ecopath_masks as read_ecopath_masks,
)
from goa_ecopath.roms.vertical import (
    compute_column_statistic as compute_column_statistic,
)
