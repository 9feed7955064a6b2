"""
urdf-inertia: URDF inertial data from closed triangle meshes
"""

__version__ = "0.1.0"
