"""Central module containing the numeric settings of the spline engine."""

from __future__ import annotations

###############################################################################
# Arc length
###############################################################################

# Number of Gauss-Legendre nodes used to integrate the hodograph norm
GAUSS_LEGENDRE_ORDER: int = 12

# Relative length error at which the inverse arc-length search stops
FIND_T_TOLERANCE: float = 1.0e-4

# Upper bound of damped fixed-point steps before falling back to bisection
FIND_T_MAX_ITERATIONS: int = 64

# Upper bound of bisection steps in the fallback (2**-60 is below float resolution on [0, 1])
FIND_T_BISECTION_ITERATIONS: int = 60

###############################################################################
# Spline
###############################################################################

# Wrapped knots added on each side of a closed spline before solving the open system
CLOSED_SPLINE_PADDING: int = 12

# Default number of line segments per curve used by polygonize()
POLYGONIZE_STEPS: int = 16
