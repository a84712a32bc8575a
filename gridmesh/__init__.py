"""
gridmesh - parametric grid-mesh engine for image annotation.
"""

__version__ = "0.1.0"
