"""Tests for apicrate.generate.options -- generator_config.yaml and spec copying."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from apicrate.exceptions import ConfigError
from apicrate.generate.options import (
    GENERATOR_CONFIG_FILE_NAME,
    build_generator_options,
    copy_spec_file,
    render_generator_options,
    write_generator_options,
)
from apicrate.models import GeneratorOptions, GlobalConfig


class TestGeneratorOptionsModel:
    def test_defaults_by_alias(self) -> None:
        data = GeneratorOptions().model_dump(by_alias=True)
        assert data["library"] == "reqwest"
        assert data["supportAsync"] is True
        assert data["hideGenerationTimestamp"] is True
        assert data["withAWSV4Signature"] is False

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ValueError):
            GeneratorOptions.model_validate({"notAnOption": True})


class TestBuildGeneratorOptions:
    def test_package_name_is_lib_name(self, make_context) -> None:
        options = build_generator_options(make_context())
        assert options.package_name == "PetShoppe_api_lib"

    def test_lib_name_override(self, make_context) -> None:
        options = build_generator_options(make_context(lib_name="petshoppe"))
        assert options.package_name == "petshoppe"

    def test_config_overrides(self, make_context) -> None:
        config = GlobalConfig(generator_options={"supportMiddleware": True, "library": "hyper"})
        options = build_generator_options(make_context(config=config))
        assert options.support_middleware is True
        assert options.library == "hyper"

    def test_config_cannot_override_package_name(self, make_context) -> None:
        config = GlobalConfig(generator_options={"packageName": "other"})
        options = build_generator_options(make_context(config=config))
        assert options.package_name == "PetShoppe_api_lib"

    def test_unknown_config_option(self, make_context) -> None:
        config = GlobalConfig(generator_options={"notAnOption": 1})
        with pytest.raises(ConfigError, match="generator_options"):
            build_generator_options(make_context(config=config))


class TestWriteGeneratorOptions:
    def test_writes_yaml(self, make_context, crate_dir: Path) -> None:
        path = write_generator_options(make_context())

        assert path == crate_dir / GENERATOR_CONFIG_FILE_NAME
        data = yaml.safe_load(path.read_text())
        assert data["packageName"] == "PetShoppe_api_lib"
        assert data["supportAsync"] is True

    def test_key_order_follows_model(self, make_context) -> None:
        text = render_generator_options(build_generator_options(make_context()))
        assert list(yaml.safe_load(text)) == list(GeneratorOptions().model_dump(by_alias=True))

    def test_overwrites_existing(self, make_context, crate_dir: Path) -> None:
        crate_dir.mkdir()
        (crate_dir / GENERATOR_CONFIG_FILE_NAME).write_text("packageName: stale\nextra: 1\n")

        write_generator_options(make_context())

        data = yaml.safe_load((crate_dir / GENERATOR_CONFIG_FILE_NAME).read_text())
        assert data["packageName"] == "PetShoppe_api_lib"
        assert "extra" not in data


class TestCopySpecFile:
    def test_copies_local_spec(self, make_context, crate_dir: Path, tmp_path: Path) -> None:
        spec = tmp_path / "specs" / "petshoppe.yaml"
        spec.parent.mkdir()
        spec.write_text("openapi: 3.0.3\n")
        crate_dir.mkdir()

        destination = copy_spec_file(make_context(spec_file=spec))

        assert destination == crate_dir / "petshoppe.yaml"
        assert destination.read_text() == "openapi: 3.0.3\n"

    def test_remote_spec_not_copied(self, make_context, crate_dir: Path) -> None:
        crate_dir.mkdir()
        assert copy_spec_file(make_context()) is None
        assert list(crate_dir.iterdir()) == []
