"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apicrate.exceptions.ApicrateError` subclass.
Shell wrappers can inspect the exit code to tell which stage of the
pipeline failed without parsing stderr.

Example::

    $ apicrate --name PetShoppe --api-url https://pet.example --spec-url ...
    $ echo $?
    3   # EXIT_SCAFFOLD_FAILURE -- the target directory was not empty
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid or missing parameters."""

EXIT_SCAFFOLD_FAILURE = 3
"""The output directory could not be prepared or ``cargo init`` failed."""

EXIT_MANIFEST_FAILURE = 4
"""The Cargo manifest could not be read, patched, or written."""

EXIT_DOCUMENT_FAILURE = 5
"""A generated document could not be serialised or written."""

EXIT_PROCESS_FAILURE = 6
"""An external process (``cargo make``) exited with a non-zero status."""
