"""Writers for every document apicrate generates or patches.

* :mod:`~apicrate.generate.options` -- ``generator_config.yaml`` for the
  OpenAPI Generator, plus the copy of a local spec file.
* :mod:`~apicrate.generate.taskgraph` -- ``Makefile.toml`` for ``cargo make``.
* :mod:`~apicrate.generate.readme` -- ``README.md`` title and attribution.
* :mod:`~apicrate.generate.manifest` -- in-place ``Cargo.toml`` patching.
"""

from apicrate.generate.manifest import ManifestPatcher
from apicrate.generate.options import build_generator_options, copy_spec_file, write_generator_options
from apicrate.generate.readme import ReadmeWriter, append_attribution, write_readme
from apicrate.generate.taskgraph import build_task_graph, write_task_graph

__all__ = [
    "ManifestPatcher",
    "ReadmeWriter",
    "append_attribution",
    "build_generator_options",
    "build_task_graph",
    "copy_spec_file",
    "write_generator_options",
    "write_readme",
    "write_task_graph",
]
