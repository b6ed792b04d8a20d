"""Test coverage readers, BED writers and signal tracks."""

import numpy as np
import pytest

from zpeaks.core.domain import (
    Peak,
    Region,
    ReplicatedSubPeak,
    SkewGaussianParameters,
    StandardGaussianParameters,
    SubPeak,
)
from zpeaks.core.domain.coverage import Coverage
from zpeaks.core.shared.exceptions import DataIOError
from zpeaks.io import (
    SIGNAL_WRITERS,
    SignalSection,
    bed_peak_name,
    is_bigwig,
    iterate_signal_sections,
    read_bedgraph,
    read_bigwig,
    read_chrom_filter,
    read_coverage,
    subpeak_score,
    sum_coverages,
    write_bedgraph,
    write_bigwig,
    write_peaks_bed,
    write_subpeaks_bed,
    write_wig,
)


def read_lines(path):
    return path.read_text().splitlines()


class TestBedNames:
    """Tests for deterministic region names."""

    def test_known_value(self):
        assert bed_peak_name("chr1", Region(0, 1)) == "chr1AAAAAAAAAAE"

    def test_deterministic(self):
        assert bed_peak_name("chr2", Region(1234, 5678)) == bed_peak_name("chr2", Region(1234, 5678))

    def test_distinct(self):
        names = {
            bed_peak_name(chrom, Region(start, start + length))
            for chrom in ("chr1", "chr2")
            for start in range(0, 500, 50)
            for length in (0, 1, 10)
        }
        assert len(names) == 2 * 10 * 3

    def test_no_padding(self):
        assert "=" not in bed_peak_name("chrX", Region(7, 99))


class TestBedWriters:
    """Tests for peak and sub-peak BED files."""

    def test_write_peaks(self, tmp_path):
        path = tmp_path / "peaks.bed"
        count = write_peaks_bed(
            path,
            {
                "chr1": [Peak(Region(10, 19), 12.5), Peak(Region(40, 40), 3.0)],
                "chr2": [Peak(Region(0, 5), 7.0)],
            },
        )
        assert count == 3
        lines = read_lines(path)
        assert lines[0] == f"chr1\t10\t20\t{bed_peak_name('chr1', Region(10, 19))}\t12.5"
        assert lines[1].split("\t")[1:3] == ["40", "41"]
        assert lines[2].startswith("chr2\t0\t6\t")

    def test_subpeak_scores(self):
        region = Region(1, 2)
        assert subpeak_score(SubPeak(region, 1.0, StandardGaussianParameters(2.5, 1.5, 1.0))) == "2.5"
        assert subpeak_score(SubPeak(region, 1.0, SkewGaussianParameters(2.5, 1.5, 1.0, 0.3))) == "2.5#0.3"
        replicated = ReplicatedSubPeak(region, 1.0, SkewGaussianParameters(2.5, 1.5, 1.0, -1.0), 4.25)
        assert subpeak_score(replicated) == "2.5#-1#4.25"

    def test_write_subpeaks(self, tmp_path):
        path = tmp_path / "sub_peaks.bed"
        sub_peak = SubPeak(Region(100, 120), 4.0, StandardGaussianParameters(2.0, 110.0, 10.0))
        assert write_subpeaks_bed(path, {"chr1": [sub_peak]}) == 1
        chrom, start, end, name, score = read_lines(path)[0].split("\t")
        assert (chrom, start, end, score) == ("chr1", "100", "121", "2")
        assert name == bed_peak_name("chr1", Region(100, 120))

    def test_sub_peak_before_chromosome_start_is_clamped(self, tmp_path):
        path = tmp_path / "sub_peaks.bed"
        sub_peak = SubPeak(Region(-4, 6), 4.0, StandardGaussianParameters(2.0, 1.0, 5.0))
        write_subpeaks_bed(path, {"chr1": [sub_peak]})
        chrom, start, end, name, _ = read_lines(path)[0].split("\t")
        assert (chrom, start, end) == ("chr1", "0", "7")
        assert name == bed_peak_name("chr1", Region(0, 6))


class TestSignalSections:
    """Tests for the run-length encoding of signal tracks."""

    def test_sections(self):
        values = [0, 2, 2, 2, 0, 0, 5, 1, 1]
        assert list(iterate_signal_sections(values)) == [
            SignalSection(1, 3, 2.0),
            SignalSection(6, 1, 5.0),
            SignalSection(7, 2, 1.0),
        ]

    def test_negative_values_are_gaps(self):
        assert list(iterate_signal_sections([-1.0, -1.0, 3.0])) == [SignalSection(2, 1, 3.0)]

    def test_empty(self):
        assert list(iterate_signal_sections([])) == []

    def test_reconstructs_positive_part(self, rng):
        values = np.repeat(rng.integers(-2, 4, 60), rng.integers(1, 6, 60)).astype(float)
        rebuilt = np.zeros_like(values)
        for section in iterate_signal_sections(values):
            rebuilt[section.start : section.end] = section.value
        np.testing.assert_array_equal(rebuilt, np.maximum(values, 0.0))


class TestSignalWriters:
    """Tests for bedGraph and wiggle output."""

    def test_bedgraph(self, tmp_path):
        path = tmp_path / "signal.bedGraph"
        write_bedgraph(path, {"chr1": np.array([0.0, 1.5, 1.5, 0.0, 2.0])})
        assert read_lines(path) == [
            "track type=bedGraph",
            "chr1\t1\t3\t1.5",
            "chr1\t4\t5\t2",
        ]

    def test_bedgraph_accepts_coverage(self, tmp_path):
        path = tmp_path / "signal.bedGraph"
        write_bedgraph(path, {"chr1": Coverage("chr1", np.array([3.0, 3.0]))})
        assert read_lines(path)[1] == "chr1\t0\t2\t3"

    def test_wig_headers_follow_span(self, tmp_path):
        path = tmp_path / "signal.wig"
        write_wig(path, {"chr1": np.array([1.0, 1.0, 2.0, 2.0, 0.0, 3.0])})
        assert read_lines(path) == [
            "track type=wiggle_0",
            "variableStep chrom=chr1 span=2",
            "1 1",
            "3 2",
            "variableStep chrom=chr1 span=1",
            "6 3",
        ]

    def test_registry(self):
        assert SIGNAL_WRITERS == {"bedgraph": write_bedgraph, "wig": write_wig, "bigwig": write_bigwig}


class TestReadBedgraph:
    """Tests for the bedGraph reader."""

    def test_dense_values(self, tmp_path):
        path = tmp_path / "in.bedGraph"
        path.write_text(
            "track type=bedGraph\n"
            "# comment\n"
            "chr1\t2\t5\t3\n"
            "chr1\t7\t8\t1.5\n"
            "chr2 0 3 2\n"
        )
        coverages = read_bedgraph(path)
        assert list(coverages) == ["chr1", "chr2"]
        np.testing.assert_array_equal(coverages["chr1"].values, [0, 0, 3, 3, 3, 0, 0, 1.5])
        assert coverages["chr1"].chr_length == 8
        assert coverages["chr1"].sum == pytest.approx(10.5)
        np.testing.assert_array_equal(coverages["chr2"].values, [2, 2, 2])

    def test_chrom_filter(self, tmp_path):
        path = tmp_path / "in.bedGraph"
        path.write_text("chr1\t0\t5\t1\nchr2\t0\t5\t1\n")
        assert list(read_bedgraph(path, {"chr2": None})) == ["chr2"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.bedGraph"
        path.write_text("track type=bedGraph\n")
        assert read_bedgraph(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataIOError, match="not found"):
            read_bedgraph(tmp_path / "missing.bedGraph")

    def test_malformed_value(self, tmp_path):
        path = tmp_path / "bad.bedGraph"
        path.write_text("chr1\t0\t5\tmany\n")
        with pytest.raises(DataIOError, match="Malformed"):
            read_bedgraph(path)

    def test_invalid_coordinates(self, tmp_path):
        path = tmp_path / "bad.bedGraph"
        path.write_text("chr1\t10\t5\t1\n")
        with pytest.raises(DataIOError, match="invalid coordinates"):
            read_bedgraph(path)

    def test_round_trip_with_writer(self, tmp_path, bedgraph_file, bump_coverage):
        path = bedgraph_file({"chr1": bump_coverage})
        np.testing.assert_allclose(read_bedgraph(path)["chr1"].values, bump_coverage)


class TestChromFilter:
    """Tests for chromosome filter files."""

    def test_entries(self, tmp_path):
        path = tmp_path / "filter.txt"
        path.write_text("chr1\n\nchr2 100-200\n")
        assert read_chrom_filter(path) == {"chr1": None, "chr2": Region(100, 199)}

    def test_malformed_line(self, tmp_path):
        path = tmp_path / "filter.txt"
        path.write_text("chr1\nchr2 100_200\n")
        with pytest.raises(DataIOError, match="line 2"):
            read_chrom_filter(path)

    def test_reversed_range(self, tmp_path):
        path = tmp_path / "filter.txt"
        path.write_text("chr3 500-100\n")
        with pytest.raises(DataIOError, match="line 1"):
            read_chrom_filter(path)


class TestSumCoverages:
    """Tests for summing coverage across sources."""

    def test_zero_pads_to_longest(self):
        a = {"chr1": Coverage("chr1", np.array([1.0, 2.0]))}
        b = {"chr1": Coverage("chr1", np.array([1.0, 1.0, 4.0])), "chr2": Coverage("chr2", np.ones(2))}
        summed = sum_coverages([a, b])
        np.testing.assert_array_equal(summed["chr1"].values, [2.0, 3.0, 4.0])
        assert summed["chr1"].chr_length == 3
        np.testing.assert_array_equal(summed["chr2"].values, [1.0, 1.0])


class TestBigWig:
    """Tests for bigWig signal output and coverage input."""

    @pytest.fixture
    def bigwig_file(self, tmp_path):
        path = tmp_path / "signal.bw"
        write_bigwig(
            path,
            {
                "chr1": Coverage("chr1", np.array([0.0, 1.5, 1.5, 0.0, 2.0, 0.0])),
                "chr2": np.array([3.0, 3.0, 0.0]),
                "chr3": np.zeros(4),
            },
        )
        return path

    def test_detection(self, bigwig_file, bump_bedgraph):
        assert is_bigwig(bigwig_file)
        assert not is_bigwig(bump_bedgraph)

    def test_sections_survive(self, bigwig_file):
        coverages = read_bigwig(bigwig_file)
        assert list(coverages) == ["chr1", "chr2"]
        np.testing.assert_array_equal(coverages["chr1"].values, [0.0, 1.5, 1.5, 0.0, 2.0, 0.0])
        assert coverages["chr1"].chr_length == 6
        np.testing.assert_array_equal(coverages["chr2"].values, [3.0, 3.0, 0.0])

    def test_chrom_filter(self, bigwig_file):
        assert list(read_bigwig(bigwig_file, {"chr2": None})) == ["chr2"]

    def test_read_coverage_dispatches_on_format(self, bigwig_file, bump_bedgraph):
        assert list(read_coverage(bigwig_file)) == ["chr1", "chr2"]
        np.testing.assert_array_equal(
            read_coverage(bump_bedgraph)["chr1"].values, read_bedgraph(bump_bedgraph)["chr1"].values
        )

    def test_not_a_bigwig(self, bump_bedgraph):
        with pytest.raises(DataIOError):
            read_bigwig(bump_bedgraph)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataIOError, match="not found"):
            read_coverage(tmp_path / "missing.bw")
