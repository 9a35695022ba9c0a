"""
Physics model for ionospheric corrections.

Shell clipping, electron-density access, TEC integration and refraction
tracing used by the IRI2007 correction model.
"""

from .shell_geometry import PathSegment, intersect_shell, cartesian_to_geodetic
from .electron_density import (
    ElectronDensityProvider,
    ConstantDensityProvider,
    IRI2016DensityProvider,
    DensityAdapter,
)
from .tec_integrator import TECIntegrator
from .bending_angle import BendingAngleSolver, refractive_index

__all__ = [
    'PathSegment',
    'intersect_shell',
    'cartesian_to_geodetic',
    'ElectronDensityProvider',
    'ConstantDensityProvider',
    'IRI2016DensityProvider',
    'DensityAdapter',
    'TECIntegrator',
    'BendingAngleSolver',
    'refractive_index',
]
