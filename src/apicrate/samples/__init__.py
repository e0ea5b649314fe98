"""Bundled sample data for ``apicrate test-generation``.

The test-generation sub-command scaffolds a throwaway crate in the system
temp directory from the PetShoppe sample spec shipped here, so the whole
pipeline can be exercised without a real API.
"""

from __future__ import annotations

from pathlib import Path

SAMPLES_DIR = Path(__file__).parent

PETSTORE_SPEC_PATH = SAMPLES_DIR / "petstore.yaml"
"""The bundled PetShoppe OpenAPI 3.0 document."""

TESTING_SPEC_FILE_NAME = "petshoppe_test_spec.yaml"
"""File name the sample spec is materialised under in the temp directory."""

TEST_API_NAME = "PetShoppe"
TEST_API_URL = "https://www.petshoppe.example"


def petstore_yaml() -> str:
    """Return the text of the bundled PetShoppe spec."""
    return PETSTORE_SPEC_PATH.read_text(encoding="utf-8")
