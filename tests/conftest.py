"""Pytest fixtures for ZPeaks tests."""

import pytest

import numpy as np


def gaussian_curve(x, height, mean, std_dev):
    """Plain Gaussian bump used to build synthetic curves."""
    return height * np.exp(-((np.asarray(x, dtype=float) - mean) ** 2) / (2.0 * std_dev**2))


def write_track(path, tracks):
    """Write ``{chrom: array}`` as a bedGraph file, one record per nonzero run."""
    with path.open("w") as f:
        f.write("track type=bedGraph name=synthetic\n")
        for chrom, values in tracks.items():
            values = np.asarray(values, dtype=float)
            start = 0
            for i in range(1, len(values) + 1):
                if i == len(values) or values[i] != values[start]:
                    if values[start] != 0:
                        f.write(f"{chrom}\t{start}\t{i}\t{values[start]:.6g}\n")
                    start = i
            # Pin the chromosome length even when the track ends in zeros
            if values[-1] == 0:
                f.write(f"{chrom}\t{len(values) - 1}\t{len(values)}\t0\n")
    return path


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def bump_coverage():
    """Flat coverage of 1 over 4 kb with one Gaussian bump at 2000."""
    x = np.arange(4000)
    return 1.0 + np.round(gaussian_curve(x, 50.0, 2000.0, 20.0))


@pytest.fixture
def bedgraph_file(tmp_path):
    """Factory writing synthetic tracks to a bedGraph file under tmp_path."""

    def make(tracks, name="coverage.bedGraph"):
        return write_track(tmp_path / name, tracks)

    return make


@pytest.fixture
def bump_bedgraph(bedgraph_file, bump_coverage):
    return bedgraph_file({"chr1": bump_coverage})


@pytest.fixture
def gaussian():
    """The :func:`gaussian_curve` helper, for building expected curves."""
    return gaussian_curve
