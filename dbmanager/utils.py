"""Utility functions for dbmanager."""

import importlib
from typing import Any


def import_object(path: str) -> Any:
    """Import an object from a dotted path.

    Both ``package.module.Name`` and ``package.module:Name`` are accepted.

    Args:
        path: Import path of the object

    Returns:
        The imported object

    Raises:
        ImportError: If the module cannot be imported or the path is invalid
        AttributeError: If the module has no such attribute
    """
    module_name, separator, attribute = path.partition(":")
    if not separator:
        module_name, _, attribute = path.rpartition(".")

    if not module_name or not attribute:
        raise ImportError(f"Invalid import path: {path}")

    obj: Any = importlib.import_module(module_name)
    for part in attribute.split("."):
        obj = getattr(obj, part)
    return obj
