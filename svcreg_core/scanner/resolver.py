"""Resolve dotted class names read from manifests and entry points."""

from __future__ import annotations

import importlib
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

TypeResolver = Callable[[str], "type | None"]


def _walk(target: Any, path: list[str]) -> Any:
    for attribute in path:
        target = getattr(target, attribute)
    return target


def _import_attribute(module_path: str, attributes: list[str]) -> Any:
    module = importlib.import_module(module_path)
    return _walk(module, attributes)


def looks_like_type_name(name: str) -> bool:
    """True when ``name`` is a qualified dotted path (``pkg.Class`` or ``pkg:Class``)."""

    parts = name.replace(":", ".").split(".")
    return len(parts) > 1 and all(part.isidentifier() for part in parts)


def import_type(qualified_name: str) -> type | None:
    """Import ``pkg.mod.Class``, ``pkg.mod:Class`` or ``pkg.mod:Outer.Inner``.

    Returns None (after logging) when the name cannot be imported or does
    not name a class.
    """

    name = qualified_name.strip()
    if not looks_like_type_name(name):
        logger.debug("not a qualified class name: %r", qualified_name)
        return None

    candidate: Any = None
    try:
        if ":" in name:
            module_path, attribute_path = name.split(":", 1)
            candidate = _import_attribute(module_path, attribute_path.split("."))
        else:
            parts = name.split(".")
            for split in range(len(parts) - 1, 0, -1):
                try:
                    candidate = _import_attribute(".".join(parts[:split]), parts[split:])
                    break
                except (ImportError, AttributeError):
                    continue
    except (ImportError, AttributeError) as exc:
        logger.debug("cannot import %s: %s", name, exc)
        return None
    except Exception:  # module-level code of the imported module failed
        logger.warning("importing %s raised an error", name, exc_info=True)
        return None

    if not isinstance(candidate, type):
        logger.debug("%s does not name a class", name)
        return None
    return candidate
