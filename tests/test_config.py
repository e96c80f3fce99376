"""Tests for TOML configuration loading."""

from dataclasses import fields

import pytest

from shared.config import DecoderConfig, GlobalConfig, InspectConfig


class TestLoad:
    def test_defaults(self):
        config = InspectConfig()
        assert config.decoder.validate_magic is True
        assert config.decoder.strict_attribute_length is False
        assert config.decoder.max_resolve_depth == 16
        assert config.decoder.default_path == "samples/App.class"
        assert config.global_settings.log_level == "INFO"

    def test_partial_file(self, tmp_path):
        path = tmp_path / "jinspect.toml"
        path.write_text(
            "[global]\n"
            'log_level = "DEBUG"\n'
            "\n"
            "[decoder]\n"
            "strict_attribute_length = true\n"
            "max_file_size = 1024\n"
        )
        config = InspectConfig.load(path)
        assert config.global_settings.log_level == "DEBUG"
        assert config.decoder.strict_attribute_length is True
        assert config.decoder.max_file_size == 1024
        assert config.decoder.validate_magic is True

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "jinspect.toml"
        path.write_text("[decoder]\nno_such_option = 1\n\n[extra]\nx = 2\n")
        assert InspectConfig.load(path).decoder == DecoderConfig()

    def test_global_section_holds_logging_only(self, tmp_path):
        path = tmp_path / "jinspect.toml"
        path.write_text('[global]\nversion = "9.9.9"\nlog_json = true\n')
        settings = InspectConfig.load(path).global_settings
        assert settings == GlobalConfig(log_json=True)
        assert [f.name for f in fields(GlobalConfig)] == ["log_level", "log_file", "log_json"]

    def test_explicit_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            InspectConfig.load(tmp_path / "missing.toml")
