"""I/O module for ZPeaks.

Handles file operations including:
- Coverage input (bedGraph, bigWig) and chromosome filters
- Peak and sub-peak BED output
- Signal track output (bedGraph, wiggle, bigWig)
- Configuration file loading/saving (TOML)
"""

from zpeaks.io.bed import bed_peak_name, subpeak_score, write_peaks_bed, write_subpeaks_bed
from zpeaks.io.config import generate_default_config, load_config, save_config
from zpeaks.io.coverage import (
    ChromFilter,
    is_bigwig,
    read_bedgraph,
    read_bigwig,
    read_chrom_filter,
    read_coverage,
    sum_coverages,
)
from zpeaks.io.signal import (
    SIGNAL_WRITERS,
    SignalSection,
    iterate_signal_sections,
    write_bedgraph,
    write_bigwig,
    write_wig,
)

__all__ = [
    "SIGNAL_WRITERS",
    "ChromFilter",
    "SignalSection",
    "bed_peak_name",
    "generate_default_config",
    "is_bigwig",
    "iterate_signal_sections",
    "load_config",
    "read_bedgraph",
    "read_bigwig",
    "read_chrom_filter",
    "read_coverage",
    "save_config",
    "subpeak_score",
    "sum_coverages",
    "write_bedgraph",
    "write_bigwig",
    "write_peaks_bed",
    "write_subpeaks_bed",
    "write_wig",
]
