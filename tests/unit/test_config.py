"""Test configuration models and TOML persistence."""

import tomllib
from pathlib import Path

import pytest
from pydantic import ValidationError

from zpeaks.core.domain.config import (
    OutputConfig,
    PdfConfig,
    PeakConfig,
    SubPeakConfig,
    ZPeaksConfig,
)
from zpeaks.core.shared.exceptions import ConfigError
from zpeaks.io.config import generate_default_config, load_config, save_config
from zpeaks.services.run import RunConfig


class TestModels:
    """Tests for defaults and validation."""

    def test_defaults(self):
        config = ZPeaksConfig()
        assert config.pdf.bandwidth == 50.0
        assert config.pdf.normalize is False
        assert config.peaks.threshold == 6.0
        assert config.sub_peaks.mode == "skew"
        assert config.sub_peaks.soft_max == 2000
        assert config.sub_peaks.hard_max == 5000
        assert config.workers >= 1
        assert not config.output.has_outputs()

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            PdfConfig(bandwidht=10.0)

    @pytest.mark.parametrize("bandwidth", [0.0, -5.0])
    def test_bandwidth_positive(self, bandwidth):
        with pytest.raises(ValidationError):
            PdfConfig(bandwidth=bandwidth)

    def test_threshold_positive(self):
        with pytest.raises(ValidationError):
            PeakConfig(threshold=0.0)

    def test_unknown_mode(self):
        with pytest.raises(ValidationError):
            SubPeakConfig(mode="lorentzian")

    def test_soft_max_above_hard_max(self):
        with pytest.raises(ValidationError, match="soft_max"):
            SubPeakConfig(soft_max=6000, hard_max=5000)

    def test_has_outputs(self):
        assert OutputConfig(signal=Path("signal.wig")).has_outputs()

    def test_workers_positive(self):
        with pytest.raises(ValidationError):
            ZPeaksConfig(workers=0)


class TestTomlPersistence:
    """Tests for loading and saving TOML configuration files."""

    def test_round_trip(self, tmp_path):
        config = ZPeaksConfig(
            pdf=PdfConfig(bandwidth=20.0, seed=11),
            peaks=PeakConfig(threshold=4.5),
            sub_peaks=SubPeakConfig(mode="standard", acceptable_error=0.01),
            output=OutputConfig(peaks=Path("out/peaks.bed"), signal_format="wig"),
            workers=3,
        )
        path = tmp_path / "config.toml"
        save_config(config, path)
        assert load_config(path) == config

    def test_saved_file_omits_unset_paths(self, tmp_path):
        path = tmp_path / "config.toml"
        save_config(ZPeaksConfig(), path)
        with path.open("rb") as f:
            data = tomllib.load(f)
        assert "sub_peaks" not in data["output"]
        assert "seed" not in data["pdf"]

    def test_default_template_is_valid(self, tmp_path):
        path = tmp_path / "zpeaks.toml"
        path.write_text(generate_default_config())
        config = load_config(path)
        assert config.output.peaks == Path("peaks.bed")
        assert config.sub_peaks.mode == "skew"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[pdf\nbandwidth = 1\n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "invalid.toml"
        path.write_text("[peaks]\nthreshold = -1\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)


class TestRunConfig:
    """Tests for run-level checks."""

    def test_requires_inputs(self):
        with pytest.raises(ValidationError):
            RunConfig(inputs=[])

    def test_no_outputs(self):
        run_config = RunConfig(inputs=[Path("a.bedGraph")])
        with pytest.raises(ConfigError, match="No output"):
            run_config.check()

    def test_single_mode_takes_one_input(self):
        run_config = RunConfig(
            inputs=[Path("a.bedGraph"), Path("b.bedGraph")],
            settings=ZPeaksConfig(output=OutputConfig(peaks=Path("peaks.bed"))),
        )
        with pytest.raises(ConfigError, match="exactly one"):
            run_config.check()

    def test_replicated_needs_two_inputs(self):
        run_config = RunConfig(
            inputs=[Path("a.bedGraph")],
            mode="replicated",
            settings=ZPeaksConfig(output=OutputConfig(peaks=Path("peaks.bed"))),
        )
        with pytest.raises(ConfigError, match="two inputs"):
            run_config.check()

    def test_valid(self):
        run_config = RunConfig(
            inputs=[Path("a.bedGraph"), Path("b.bedGraph")],
            mode="bottom_up",
            settings=ZPeaksConfig(output=OutputConfig(sub_peaks=Path("sub_peaks.bed"))),
        )
        run_config.check()
