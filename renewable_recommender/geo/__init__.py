"""
Geospatial helpers.

Modules
-------
territory     : Bounding-box validation (fails closed).
interpolation : SpatialInterpolator — IDW over the k nearest records.
"""
