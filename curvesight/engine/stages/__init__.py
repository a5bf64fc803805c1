"""Cycle stages. Importing a module registers its stage."""

from __future__ import annotations

import importlib
import pkgutil


def register_stages() -> None:
    """Import every stage module so @stage decorators fire."""
    for _, module_name, _ in pkgutil.iter_modules(__path__):
        importlib.import_module(f"{__name__}.{module_name}")
