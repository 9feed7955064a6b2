"""
Geometry module for urdf-inertia - mesh mass properties and joint offset chains
"""

from .inertia import InertiaResult, LinkInertiaRecord, compute_inertia, measure_mesh
from .offsets import cumulative_translation, translation_chain

__all__ = [
    "InertiaResult",
    "LinkInertiaRecord",
    "compute_inertia",
    "measure_mesh",
    "cumulative_translation",
    "translation_chain"
]
