"""Tests for spectr.yaml loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from spectr_cli.core.config import (
    ConfigError,
    SpectrConfig,
    find_config_file,
    load_config,
    validate_root_dir,
)
from spectr_cli.validation import Strictness


class TestLoadConfig:
    def test_defaults_without_config_file(self, tmp_path: Path):
        config = load_config(tmp_path)

        assert config.project_root == tmp_path.resolve()
        assert config.root_dir == "spectr"
        assert config.strictness is Strictness.STRICT
        assert config.workers == 1
        assert config.config_path is None

    def test_reads_values(self, tmp_path: Path):
        (tmp_path / "spectr.yaml").write_text(
            "root_dir: docs-specs\nvalidation:\n  strictness: WARN\n  workers: 4\n",
            encoding="utf-8",
        )

        config = load_config(tmp_path)

        assert config.root_dir == "docs-specs"
        assert config.strictness is Strictness.WARN
        assert config.workers == 4
        assert config.root_path == tmp_path.resolve() / "docs-specs"

    def test_found_from_nested_directory(self, tmp_path: Path):
        (tmp_path / "spectr.yaml").write_text("root_dir: specs-root\n", encoding="utf-8")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        config = load_config(nested)

        assert config.project_root == tmp_path.resolve()
        assert config.config_path == find_config_file(nested)

    def test_empty_file_uses_defaults(self, tmp_path: Path):
        (tmp_path / "spectr.yaml").write_text("", encoding="utf-8")

        assert load_config(tmp_path).root_dir == "spectr"

    def test_invalid_yaml(self, tmp_path: Path):
        (tmp_path / "spectr.yaml").write_text("root_dir: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="failed to parse YAML"):
            load_config(tmp_path)

    def test_non_mapping(self, tmp_path: Path):
        (tmp_path / "spectr.yaml").write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="must contain a YAML mapping"):
            load_config(tmp_path)

    def test_unknown_strictness(self, tmp_path: Path):
        (tmp_path / "spectr.yaml").write_text("validation:\n  strictness: loose\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="invalid strictness 'loose'"):
            load_config(tmp_path)

    @pytest.mark.parametrize("workers", ["0", "-2", "two", "true"])
    def test_invalid_workers(self, tmp_path: Path, workers: str):
        (tmp_path / "spectr.yaml").write_text(f"validation:\n  workers: {workers}\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="workers must be a positive integer"):
            load_config(tmp_path)

    def test_undecodable_file(self, tmp_path: Path):
        (tmp_path / "spectr.yaml").write_bytes(b"root_dir: \xff\xfe\n")

        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_errors_name_the_config_file(self, tmp_path: Path):
        (tmp_path / "spectr.yaml").write_text("root_dir: ../escape\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="invalid configuration in"):
            load_config(tmp_path)


class TestValidateRootDir:
    @pytest.mark.parametrize("value", ["a/b", "a\\b", "..", "spec*", ".hidden", "   "])
    def test_rejects(self, value: str):
        with pytest.raises(ConfigError):
            validate_root_dir(value)

    @pytest.mark.parametrize("value", ["spectr", "my-specs", "docs_specs"])
    def test_accepts(self, value: str):
        validate_root_dir(value)


class TestSpectrConfig:
    def test_root_path_joins_root_dir(self, tmp_path: Path):
        config = SpectrConfig(project_root=tmp_path, root_dir="docs-specs")

        assert config.root_path == tmp_path / "docs-specs"
