"""Sub-peak fitting: Gaussian families, least-squares refinement and decomposition."""

from zpeaks.core.fitting.decomposer import (
    ReplicatedSubPeakFitter,
    SubPeakFitter,
    fit_peaks,
    fit_replicated_peaks,
    parameters_to_score,
)
from zpeaks.core.fitting.families import (
    FAMILIES,
    GaussianFamily,
    SkewGaussianFamily,
    StandardGaussianFamily,
    get_family,
    list_families,
    register_family,
    skew_mode,
)
from zpeaks.core.fitting.optimizer import OptimizeResult, optimize

__all__ = [
    "FAMILIES",
    "GaussianFamily",
    "OptimizeResult",
    "ReplicatedSubPeakFitter",
    "SkewGaussianFamily",
    "StandardGaussianFamily",
    "SubPeakFitter",
    "fit_peaks",
    "fit_replicated_peaks",
    "get_family",
    "list_families",
    "optimize",
    "parameters_to_score",
    "register_family",
    "skew_mode",
]
