"""Canonical Pydantic models shared across all apicrate modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Configuration models** -- the optional user ``config.json``:
    :class:`GlobalConfig`.

**Invocation models** -- raw CLI input and the context resolved from it:
    :class:`TestGeneration`, :class:`InvocationParameters`, and
    :class:`GenerationContext`.

**Document models** -- the files apicrate writes into the new crate:
    :class:`GeneratorOptions`, :class:`TaskName`, :class:`EnvScript`,
    :class:`Task`, :class:`TaskGraph`, and :class:`Edition`.

All models use Pydantic v2. :class:`GenerationContext` is frozen: it is
computed once per invocation and passed explicitly to every writer.
"""

from __future__ import annotations

import enum
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)


# --- Global Config ---


class GlobalConfig(BaseModel):
    """User-level defaults stored in ``<config_dir>/config.json``.

    Example::

        {
          "authors": ["Ann <ann@example.com>"],
          "generator_options": {"supportMiddleware": true},
          "cargo": "cargo",
          "task_runner": ["cargo", "make"]
        }
    """

    authors: list[str] = Field(
        default_factory=list,
        description="Extra authors used when --authors is not given",
    )
    generator_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Overrides for generator_config.yaml keys (camelCase)",
    )
    cargo: str = Field(default="cargo", description="Package manager executable")
    task_runner: list[str] = Field(
        default_factory=lambda: ["cargo", "make"],
        description="Command used to run Makefile.toml tasks",
    )


# --- Invocation ---


_URL = TypeAdapter(AnyUrl)


def check_url(value: Optional[str]) -> Optional[str]:
    """Reject malformed URLs but return *value* exactly as the user typed it.

    ``AnyUrl`` normalises its input (``https://pet.example`` gains a trailing
    slash), and the URLs end up verbatim in the README and ``Makefile.toml``.
    """
    if value is None:
        return None
    try:
        _URL.validate_python(value)
    except ValidationError as exc:
        raise ValueError(exc.errors()[0]["msg"]) from None
    return value


class TestGeneration(BaseModel):
    """Options of the ``test-generation`` sub-command.

    Identifies where the generated crate's self-referential dev-dependency
    should come from. A local path wins over a repository URL.
    """

    __test__ = False  # not a pytest test class

    generator_crate_local_path: Optional[Path] = None
    generator_crate_repo_url: Optional[str] = None

    @field_validator("generator_crate_repo_url")
    @classmethod
    def _repo_url_parses(cls, value: Optional[str]) -> Optional[str]:
        return check_url(value)


class InvocationParameters(BaseModel):
    """Raw, validated CLI input before any defaults are derived."""

    site_or_api_name: str = Field(min_length=1)
    api_url: str
    api_spec_url: Optional[str] = None
    spec_file: Optional[Path] = None
    lib_name: Optional[str] = None
    extra_authors: Optional[str] = None
    output_dir: Optional[Path] = None
    autogenerate: bool = False
    bump_edition: bool = False
    test_generation: Optional[TestGeneration] = None

    @field_validator("api_url", "api_spec_url")
    @classmethod
    def _urls_parse(cls, value: Optional[str]) -> Optional[str]:
        return check_url(value)

    @property
    def is_test_generation(self) -> bool:
        """Whether the ``test-generation`` sub-command was selected."""
        return self.test_generation is not None


class GenerationContext(BaseModel):
    """Everything the writers need, resolved once per invocation.

    Built by :func:`apicrate.parameters.resolve_context`. The generation
    timestamp is captured at startup so every document reports the same
    instant.
    """

    model_config = ConfigDict(frozen=True)

    params: InvocationParameters
    lib_name: str
    spec_file_name: str
    output_dir: Path
    generation_timestamp: datetime
    extra_authors: list[str] = Field(default_factory=list)
    tool_name: str
    tool_version: str
    tool_authors: list[str] = Field(default_factory=list)
    config: GlobalConfig = Field(default_factory=GlobalConfig)

    @property
    def api_name(self) -> str:
        return self.params.site_or_api_name

    @property
    def api_url(self) -> str:
        return self.params.api_url

    @property
    def spec_url(self) -> Optional[str]:
        return self.params.api_spec_url

    @property
    def spec_file_basename(self) -> str:
        """File name the spec is stored under inside the crate."""
        return Path(self.spec_file_name).name

    @property
    def timestamp_string(self) -> str:
        """The generation timestamp formatted as RFC 3339."""
        return self.generation_timestamp.isoformat()

    @property
    def is_test_generation(self) -> bool:
        return self.params.is_test_generation


# --- Generator options ---


class GeneratorOptions(BaseModel):
    """Rust OpenAPI Generator configuration (``generator_config.yaml``).

    Field aliases are the generator's own camelCase keys. See
    https://openapi-generator.tech/docs/generators/rust/ for the meaning of
    each option.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    best_fit_int: bool = Field(
        default=False,
        alias="bestFitInt",
        description="Use best fitting integer type where minimum or maximum is set",
    )
    enum_name_suffix: str = Field(
        default="",
        alias="enumNameSuffix",
        description="Suffix appended to all enum names",
    )
    hide_generation_timestamp: bool = Field(
        default=True,
        alias="hideGenerationTimestamp",
        description="Hide the generation timestamp in generated files",
    )
    library: str = Field(
        default="reqwest",
        description="Library template to use (hyper or reqwest)",
    )
    package_name: str = Field(
        default="openapi",
        alias="packageName",
        description="Rust package name",
    )
    package_version: str = Field(
        default="1.0.0",
        alias="packageVersion",
        description="Rust package version",
    )
    prefer_unsigned_int: bool = Field(
        default=False,
        alias="preferUnsignedInt",
        description="Prefer unsigned integers where the minimum value is >= 0",
    )
    support_async: bool = Field(
        default=True,
        alias="supportAsync",
        description="Generate async functions (reqwest only)",
    )
    support_middleware: bool = Field(
        default=False,
        alias="supportMiddleware",
        description="Add support for reqwest-middleware (reqwest only)",
    )
    support_multiple_responses: bool = Field(
        default=False,
        alias="supportMultipleResponses",
        description="Return an enum of all possible 2xx schemas (reqwest only)",
    )
    use_single_request_parameter: bool = Field(
        default=False,
        alias="useSingleRequestParameter",
        description="Generate one argument holding all endpoint parameters",
    )
    with_aws_v4_signature: bool = Field(
        default=False,
        alias="withAWSV4Signature",
        description="Include AWS v4 signature support",
    )


# --- Task graph ---


class TaskName(str, enum.Enum):
    """The closed set of tasks written to ``Makefile.toml``."""

    CRATE_SCAFFOLD = "crate-scaffold"
    OUTPUT_DIR_CREATE = "output-dir-create"
    OUTPUT_DIR_CLEAN = "output-dir-clean"
    SPEC_DOWNLOAD = "spec-download"
    SPEC_DOWNLOAD_DEFAULT = "spec-download-default"
    SPEC_VALIDATE = "spec-validate"
    OPENAPI_CLI_INSTALL = "openapi-cli-install"
    OPENAPI_CLI_CHECK = "openapi-cli-check"
    LIB_CODE_GENERATE = "lib-code-generate"
    LIB_CODE_GENERATE_DRY_RUN = "lib-code-generate-dry-run"
    LIB_CODE_FIX = "lib-code-fix"
    GENERATE_ALL = "generate-all"


class EnvScript(BaseModel):
    """An env value computed by the task runner from a shell script."""

    script: list[str]


EnvValue = Union[str, EnvScript]


class Task(BaseModel):
    """One ``cargo-make`` task definition.

    A task either runs ``command`` with ``args``, runs an inline ``script``,
    or only aggregates its ``dependencies``.
    """

    description: Optional[str] = None
    category: Optional[str] = None
    command: Optional[str] = None
    args: Optional[list[str]] = None
    script: Optional[str] = None
    dependencies: list[TaskName] = Field(default_factory=list)

    @model_validator(mode="after")
    def _command_or_script(self) -> "Task":
        if self.command is not None and self.script is not None:
            raise ValueError("a task runs either a command or a script, not both")
        if self.args is not None and self.command is None:
            raise ValueError("args require a command")
        return self

    def to_document(self) -> dict[str, Any]:
        """Serialisable form, omitting unset fields and empty dependencies."""
        data = self.model_dump(mode="json", exclude_none=True)
        if not data.get("dependencies"):
            data.pop("dependencies", None)
        return data


class TaskGraph(BaseModel):
    """The whole ``Makefile.toml`` document.

    Every dependency must name a task defined in the same graph.
    """

    env: dict[str, EnvValue] = Field(default_factory=dict)
    tasks: dict[TaskName, Task] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _dependencies_resolve(self) -> "TaskGraph":
        for name, task in self.tasks.items():
            missing = [dep.value for dep in task.dependencies if dep not in self.tasks]
            if missing:
                raise ValueError(
                    f"task '{name.value}' depends on undefined task(s): {', '.join(missing)}"
                )
        return self

    def to_document(self) -> dict[str, Any]:
        """Plain dict ready for TOML serialisation."""
        env: dict[str, Any] = {}
        for key, value in self.env.items():
            env[key] = value.model_dump() if isinstance(value, EnvScript) else value
        return {
            "env": env,
            "tasks": {name.value: task.to_document() for name, task in self.tasks.items()},
        }


# --- Manifest ---


class Edition(str, enum.Enum):
    """Rust editions apicrate knows how to step through, oldest first."""

    E2015 = "2015"
    E2018 = "2018"
    E2021 = "2021"

    def next(self) -> Optional["Edition"]:
        """The following rung on the ladder, or ``None`` for the newest."""
        ladder = list(Edition)
        index = ladder.index(self)
        if index + 1 < len(ladder):
            return ladder[index + 1]
        return None
