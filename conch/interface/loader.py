#!/usr/bin/env python3
# conch/interface/loader.py
from __future__ import annotations

"""
Dynamic command loader.

Features:
- Imports all modules under a given package (default: 'plugins').
- Supports 'entrypoint.py' inside a subpackage.
- Registers the COMMAND/COMMANDS a module exports, and calls its
  register(shell) function when it defines one.
"""

import importlib
import logging
import pkgutil
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Iterable

from conch.commands import Command

if TYPE_CHECKING:  # pragma: no cover
    from conch.shell import Shell

logger = logging.getLogger(__name__)


def _register_from_module(shell: "Shell", module: ModuleType) -> int:
    """Register the commands a module exports. Returns how many were added."""
    registered_count = 0
    obj = getattr(module, "COMMAND", None)
    if isinstance(obj, Command):
        shell.add_command(obj)
        registered_count += 1

    objs = getattr(module, "COMMANDS", None)
    if isinstance(objs, Iterable):
        for item in objs:
            if isinstance(item, Command):
                shell.add_command(item)
                registered_count += 1

    register = getattr(module, "register", None)
    if callable(register):
        register(shell)
    return registered_count


def load_commands(shell: "Shell", commands_package: str = "plugins") -> int:
    """
    Import all modules under the given package and register their commands.

    Supported layouts:
      1) Plain modules: plugins/foo.py  -> import plugins.foo
      2) Packages with an entrypoint: plugins/bar/entrypoint.py
         -> import plugins.bar.entrypoint
      3) Other packages: plugins/baz/__init__.py -> import plugins.baz

    Returns the number of modules imported. Works with regular and
    namespace packages.
    """
    package = importlib.import_module(commands_package)
    package_paths = [str(p) for p in getattr(package, "__path__", [])]

    if not package_paths:
        raise RuntimeError(
            f"'{commands_package}' must be a package (folder) with modules.")

    loaded_count = 0
    for base_path in package_paths:
        for modinfo in pkgutil.iter_modules([base_path]):
            module_name = modinfo.name
            if module_name.startswith("_"):
                # Ignore private modules
                continue

            target = f"{commands_package}.{module_name}"
            if modinfo.ispkg and (Path(base_path) / module_name / "entrypoint.py").exists():
                target = f"{target}.entrypoint"

            module = importlib.import_module(target)
            count = _register_from_module(shell, module)
            logger.debug("loaded %s (%d commands)", target, count)
            loaded_count += 1

    return loaded_count
