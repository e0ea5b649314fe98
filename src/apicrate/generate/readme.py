"""README generation.

The README has two parts, both rendered from Jinja2 templates in
``apicrate/templates/``:

* a title header naming the library and the API it wraps, and
* a closing attribution block saying the crate was generated, by which
  apicrate version, when, for which API, from which spec URL, and with which
  additional authors.

:meth:`ReadmeWriter.write` replaces the whole file. Code generation rewrites
``README.md`` itself, so afterwards :meth:`ReadmeWriter.append_attribution`
adds just the closing block to whatever is already there.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import BaseModel, Field

from apicrate.exceptions import DocumentGenerationError
from apicrate.fs import write_text
from apicrate.models import GenerationContext

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"
"""Path to the Jinja2 template directory (``apicrate/templates/``)."""

README_FILE_NAME = "README.md"


def _create_jinja_env() -> Environment:
    """Create a Jinja2 environment for the README templates."""
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("md.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


class ReadmeWriter(BaseModel):
    """Renders and writes the crate README."""

    lib_name: str
    api_name: str
    api_url: str
    spec_url: Optional[str] = None
    tool_name: str
    tool_version: str
    generation_timestamp: str
    extra_authors: list[str] = Field(default_factory=list)

    @classmethod
    def from_context(cls, context: GenerationContext) -> "ReadmeWriter":
        return cls(
            lib_name=context.lib_name,
            api_name=context.api_name,
            api_url=context.api_url,
            spec_url=context.spec_url,
            tool_name=context.tool_name,
            tool_version=context.tool_version,
            generation_timestamp=context.timestamp_string,
            extra_authors=context.extra_authors,
        )

    def _render(self, template_name: str) -> str:
        env = _create_jinja_env()
        variables: dict[str, Any] = self.model_dump()
        return env.get_template(template_name).render(**variables)

    def render_title(self) -> str:
        """The title header."""
        return self._render("readme_title.md.j2")

    def render_attribution(self) -> str:
        """The closing "generated by" block."""
        return self._render("readme_attribution.md.j2")

    def render(self) -> str:
        """The complete README: title header followed by the attribution block."""
        return self.render_title() + self.render_attribution()

    def write(self, crate_dir: Path) -> Path:
        """Write a fresh ``README.md`` in *crate_dir*, replacing any existing one.

        Raises:
            DocumentGenerationError: If the file cannot be written.
        """
        path = crate_dir / README_FILE_NAME
        try:
            write_text(path, self.render(), "README")
        except OSError as exc:
            raise DocumentGenerationError(f"Failed to write {path}: {exc}") from exc
        return path

    def append_attribution(self, crate_dir: Path) -> Path:
        """Append the attribution block to the existing ``README.md`` in *crate_dir*.

        The file is created when missing.

        Raises:
            DocumentGenerationError: If the file cannot be read or written.
        """
        path = crate_dir / README_FILE_NAME
        try:
            existing = path.read_text(encoding="utf-8") if path.is_file() else ""
            write_text(path, existing + self.render_attribution(), "README attribution")
        except OSError as exc:
            raise DocumentGenerationError(f"Failed to update {path}: {exc}") from exc
        return path


def write_readme(context: GenerationContext) -> Path:
    """Write the complete README for *context* into the crate directory."""
    return ReadmeWriter.from_context(context).write(context.output_dir)


def append_attribution(context: GenerationContext) -> Path:
    """Append the attribution block for *context* to the crate README."""
    return ReadmeWriter.from_context(context).append_attribution(context.output_dir)
