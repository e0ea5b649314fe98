"""Tests for apicrate.generate.readme -- README rendering, writing and appending."""

from __future__ import annotations

from pathlib import Path

import pytest

from apicrate.exceptions import DocumentGenerationError
from apicrate.generate.readme import (
    README_FILE_NAME,
    ReadmeWriter,
    append_attribution,
    write_readme,
)


@pytest.fixture
def writer() -> ReadmeWriter:
    return ReadmeWriter(
        lib_name="PetShoppe_api_lib",
        api_name="PetShoppe",
        api_url="https://pet.example/",
        spec_url="https://pet.example/openapi.yaml",
        tool_name="apicrate",
        tool_version="0.3.1",
        generation_timestamp="2024-05-01T12:30:00+00:00",
        extra_authors=["Ann", "Bo"],
    )


class TestRender:
    def test_title(self, writer: ReadmeWriter) -> None:
        title = writer.render_title()
        assert title.startswith("# PetShoppe_api_lib\n")
        assert "[PetShoppe](https://pet.example/)" in title

    def test_attribution(self, writer: ReadmeWriter) -> None:
        text = writer.render_attribution()
        assert "## About working on `PetShoppe_api_lib`" in text
        assert "generated* using apicrate v0.3.1 at 2024-05-01T12:30:00+00:00" in text
        assert "Implements the [PetShoppe](https://pet.example/)." in text
        assert "[https://pet.example/openapi.yaml](https://pet.example/openapi.yaml)" in text

    def test_additional_authors_joined(self, writer: ReadmeWriter) -> None:
        text = writer.render()
        assert "Additional authors: Ann, Bo\n" in text
        assert "Bo," not in text

    def test_no_additional_authors(self, writer: ReadmeWriter) -> None:
        text = writer.model_copy(update={"extra_authors": []}).render()
        assert "Additional authors" not in text

    def test_no_spec_url(self, writer: ReadmeWriter) -> None:
        text = writer.model_copy(update={"spec_url": None}).render_attribution()
        assert "OpenAPI specification found at" not in text

    def test_render_is_title_then_attribution(self, writer: ReadmeWriter) -> None:
        text = writer.render()
        assert text.index("# PetShoppe_api_lib") < text.index("## About working on")


class TestWrite:
    def test_write_overwrites(self, writer: ReadmeWriter, tmp_path: Path) -> None:
        (tmp_path / README_FILE_NAME).write_text("old contents\n")
        path = writer.write(tmp_path)

        assert path == tmp_path / README_FILE_NAME
        assert path.read_text() == writer.render()

    def test_append_attribution(self, writer: ReadmeWriter, tmp_path: Path) -> None:
        (tmp_path / README_FILE_NAME).write_text("# Generated client\n")
        writer.append_attribution(tmp_path)

        text = (tmp_path / README_FILE_NAME).read_text()
        assert text.startswith("# Generated client\n")
        assert text.endswith(writer.render_attribution())
        assert text.count("## About working on") == 1

    def test_append_creates_missing_file(self, writer: ReadmeWriter, tmp_path: Path) -> None:
        writer.append_attribution(tmp_path)
        assert (tmp_path / README_FILE_NAME).read_text() == writer.render_attribution()

    def test_write_failure(self, writer: ReadmeWriter, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(DocumentGenerationError):
            writer.write(blocker)


class TestContextHelpers:
    def test_write_readme(self, make_context, crate_dir: Path) -> None:
        context = make_context(extra_authors="Ann;Bo")
        path = write_readme(context)

        text = path.read_text()
        assert path == crate_dir / README_FILE_NAME
        assert "# PetShoppe_api_lib" in text
        assert "PetShoppe" in text
        assert "Additional authors: Ann, Bo" in text

    def test_append_attribution(self, make_context, crate_dir: Path) -> None:
        crate_dir.mkdir()
        (crate_dir / README_FILE_NAME).write_text("# Generated\n")
        append_attribution(make_context())

        text = (crate_dir / README_FILE_NAME).read_text()
        assert text.startswith("# Generated\n")
        assert "apicrate v" in text
