"""
Tests for analysis options
"""

import pytest
from pydantic import ValidationError

from callreach.config import AnalysisOptions, OutputFormat, build_options, load_options
from callreach.errors import ConfigError


class TestAnalysisOptions:
    """Test option defaults and validation"""

    def test_defaults(self):
        options = AnalysisOptions()
        assert options.deduplicate
        assert not options.without_args
        assert options.output_format == OutputFormat.TEXT
        assert options.output_dir == "./target"
        assert options.workers == 1
        assert not options.timing_enabled
        assert not options.has_queries

    def test_query_modes_are_exclusive(self):
        with pytest.raises(ValidationError):
            AnalysisOptions(find_callers=["a"], find_callers_by_hash=["b"])

    def test_workers_must_be_positive(self):
        with pytest.raises(ConfigError):
            build_options({"workers": 0})

    def test_output_format_flags(self):
        assert OutputFormat.BOTH.wants_text and OutputFormat.BOTH.wants_json
        assert not OutputFormat.JSON.wants_text
        assert not OutputFormat.TEXT.wants_json


class TestLoadOptions:
    """Test config-file loading and command-line overrides"""

    def write_config(self, tmp_path, text):
        path = tmp_path / "callreach.yaml"
        path.write_text(text)
        return str(path)

    def test_config_file(self, tmp_path):
        config = self.write_config(tmp_path, "output_format: json\nfind_callers: [report]\nworkers: 2\n")
        options = load_options(config)

        assert options.output_format == OutputFormat.JSON
        assert options.find_callers == ["report"]
        assert options.workers == 2

    def test_overrides_win(self, tmp_path):
        config = self.write_config(tmp_path, "output_format: json\ndeduplicate: true\n")
        options = load_options(config, {"output_format": OutputFormat.BOTH, "deduplicate": False})

        assert options.output_format == OutputFormat.BOTH
        assert not options.deduplicate

    def test_none_and_empty_overrides_are_ignored(self, tmp_path):
        config = self.write_config(tmp_path, "find_callers: [report]\noutput_dir: out\n")
        options = load_options(config, {"find_callers": [], "output_dir": None})

        assert options.find_callers == ["report"]
        assert options.output_dir == "out"

    def test_empty_config_file(self, tmp_path):
        config = self.write_config(tmp_path, "")
        assert load_options(config) == AnalysisOptions()

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_options(str(tmp_path / "missing.yaml"))

    def test_config_must_be_mapping(self, tmp_path):
        config = self.write_config(tmp_path, "- a\n- b\n")
        with pytest.raises(ConfigError):
            load_options(config)

    def test_conflicting_queries(self, tmp_path):
        config = self.write_config(tmp_path, "find_callers: [report]\n")
        with pytest.raises(ConfigError) as exc_info:
            load_options(config, {"find_callers_by_hash": ["abc"]})
        assert "mutually exclusive" in str(exc_info.value)

    def test_unknown_format(self):
        with pytest.raises(ConfigError):
            load_options(None, {"output_format": "xml"})
