"""Logging helpers shared by the formguard components.

Every component logs under `formguard.<component>`. Nothing here attaches
handlers unless `configure_logging` is asked to; embedding applications own
their logging setup.
"""

import logging
from typing import Any, Dict, Optional, TextIO

ROOT_LOGGER = "formguard"
COMPONENTS = ("policy", "risk", "form", "governance", "persistence", "cli")
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_root = logging.getLogger(ROOT_LOGGER)
_root.setLevel(logging.INFO)
_components = {name: _root.getChild(name) for name in COMPONENTS}


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """
    Get the logger for a formguard component.

    Args:
        component: Component name (e.g., "policy", "form"). Unknown names get
            their own child logger; None returns the root formguard logger.

    Returns:
        Logger instance
    """
    if not component:
        return _root
    if component not in _components:
        _components[component] = _root.getChild(component)
    return _components[component]


def _format_context(context: Optional[Dict[str, Any]]) -> str:
    if not context:
        return ""
    return " (" + ", ".join(f"{key}={value!r}" for key, value in context.items()) + ")"


def log_error(
    logger: logging.Logger,
    message: str,
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
) -> None:
    """Log an exception with its type, context and traceback."""
    logger.error("%s: %s: %s%s", message, type(error).__name__, error, _format_context(context), exc_info=True)


def log_warning(
    logger: logging.Logger,
    message: str,
    context: Optional[Dict[str, Any]] = None,
) -> None:
    """Log a warning with optional context."""
    logger.warning("%s%s", message, _format_context(context))


def configure_logging(level: int = logging.INFO, stream: Optional[TextIO] = None) -> None:
    """
    Set the level of all formguard loggers.

    Args:
        level: Logging level (logging.DEBUG, INFO, WARNING, ...)
        stream: If given, attach a formatted stream handler to the root
            formguard logger (once)
    """
    _root.setLevel(level)
    for logger in _components.values():
        logger.setLevel(level)

    if stream is not None and not any(getattr(h, "_formguard", False) for h in _root.handlers):
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._formguard = True  # type: ignore[attr-defined]
        _root.addHandler(handler)
