"""Algorithms turning coverage into densities, peaks and candidate components."""

from zpeaks.core.algorithms.candidates import (
    candidate_gaussians,
    find_candidates,
    regions_at_scale,
    zero_crossings,
)
from zpeaks.core.algorithms.density import background, pdf, smooth_all, window_size
from zpeaks.core.algorithms.linear_algebra import LinearAlgebraHelper
from zpeaks.core.algorithms.peaks import (
    call_peaks,
    merge_peaks,
    merge_replicated_peaks,
    score_peaks,
)

__all__ = [
    "LinearAlgebraHelper",
    "background",
    "call_peaks",
    "candidate_gaussians",
    "find_candidates",
    "merge_peaks",
    "merge_replicated_peaks",
    "pdf",
    "regions_at_scale",
    "score_peaks",
    "smooth_all",
    "window_size",
    "zero_crossings",
]
