"""Core constants for ZPeaks smoothing, peak calling and sub-peak fitting.

Defaults that users can change live in the configuration models; the values
here are fixed properties of the algorithms.
"""

import math
import sys

# =============================================================================
# Density Engine
# =============================================================================

SQRT2PI = math.sqrt(2.0 * math.pi)

WINDOW_RADIUS_FACTOR = math.sqrt(-2.0 * math.log(sys.float_info.min * SQRT2PI))
"""Radius, in bandwidths, beyond which a unit Gaussian underflows.

Multiplied by the bandwidth this bounds the smoothing window independently of
the chromosome length.
"""

BACKGROUND_LIMIT = 1000
"""Number of Monte-Carlo trials drawn for the background model."""

# =============================================================================
# Sub-Peak Splitting
# =============================================================================

SUB_PEAKS_SOFT_MAX = 2000
"""Peaks longer than this are split when their interior is still busy."""

SUB_PEAKS_HARD_MAX = 5000
"""Peaks longer than this are always split."""

SUB_PEAKS_SOFT_MAX_RATIO = 0.05
"""Interior min/max ratio below which a long peak is left whole.

A near-zero interior minimum means the region is one clean peak plus tails.
"""

SPLIT_MARGIN_FRACTION = 0.2
"""Fraction of the region excluded at each end when searching for a split."""

MIN_PEAK_VALUES = 5
"""Shortest curve (in positions) a replicated fit will attempt."""

# =============================================================================
# Candidate Detection
# =============================================================================

SCALE_SPACE_START_FACTOR = 1.1
"""Initial kernel width is floor(sqrt(N) * factor)."""

SCALE_SPACE_MIN_WIDTH = 2
"""Smallest kernel width used while tracking zero crossings."""

KERNEL_HALF_WIDTH_FACTOR = 4.0
"""Second-derivative kernels are sampled out to this many widths."""

SPLIT_EDGE_CROSSING = 5
"""Crossings this close to a cut end of a split region are edge artifacts."""

NEGLIGIBLE_CURVATURE = 1e-9
"""Smoothed values below this fraction of the largest magnitude count as zero."""

MIN_RELATIVE_SCORE = 1e-3
"""Refined components scoring below this fraction of the best are dropped."""

# =============================================================================
# Gaussian Families
# =============================================================================

MAX_STD_DEV = 400.0
"""Hard cap on a component's standard deviation, in base pairs."""

MAX_SKEW = 10.0
"""Shapes beyond this magnitude collapse back to a symmetric Gaussian."""

MIN_AMPLITUDE = 1e-4
"""Amplitude used when the linear initialisation yields zero."""

# =============================================================================
# Levenberg-Marquardt Defaults
# =============================================================================

LEAST_SQUARES_MAX_NFEV = 1000
"""Maximum number of function evaluations per refinement."""

COST_RELATIVE_TOLERANCE = 1e-4
"""Cost tolerance, multiplied by the average of the fitted curve."""

PARAMETER_RELATIVE_TOLERANCE = 1e-8
"""Parameter tolerance, multiplied by the average of the fitted curve."""

ORTHO_TOLERANCE = 1e-3
"""Gradient (orthogonality) tolerance, multiplied by the average of the curve."""

ACCEPTABLE_ERROR = 0.05
"""RMS error on the scaled curve that ends the greedy component search."""
