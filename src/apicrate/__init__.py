"""apicrate -- Scaffold Rust client crates from OpenAPI specifications.

Given an OpenAPI spec (a local file or a URL) and a little metadata about the
target API, apicrate initialises a new library crate, writes the OpenAPI
Generator configuration, a ``cargo-make`` task graph and a README, and can
optionally drive the generator end to end.

Typical workflow::

    apicrate --name PetShoppe --api-url https://pet.example \\
        --spec-url https://pet.example/openapi.yaml --output ./petshoppe
    cd petshoppe && cargo make generate-all

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    parameters: Derives the generation context from raw CLI input.
    scaffold: Creates and initialises the output crate directory.
    generate: Writers for every generated or patched document.
    pipeline: Sequences the steps of a full invocation.
    runner: Runs Makefile.toml tasks through cargo make.
    commands: The generation run shared by the root command and sub-commands.
    config: XDG-aware user configuration.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.1"

__authors__ = "Apicrate Maintainers <maintainers@apicrate.dev>"
"""Semicolon-separated authors credited in every generated manifest."""
