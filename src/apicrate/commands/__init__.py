"""CLI commands for apicrate.

* :mod:`~apicrate.commands.generate` -- the generation run shared by the
  root command and every sub-command.
* :mod:`~apicrate.commands.test_generation` -- ``apicrate test-generation``,
  which generates the bundled PetShoppe sample crate into a temp directory.

Sub-command callbacks are plain functions registered on the root app in
:mod:`apicrate.app`.
"""
