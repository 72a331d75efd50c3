# geokernel/geometry/constants.py
"""Constants for geometric calculations."""

# Default tolerance for floating-point comparisons
EPSILON = 1e-9

# Coordinate indices used by the axis-plane splitting routines
X_AXIS = 0
Y_AXIS = 1
Z_AXIS = 2
