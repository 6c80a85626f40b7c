"""Structlog-based logging configuration for taxrange.

The library modules (ranges, specimens, config) log through the standard
``logging`` module, while the command line tools use structlog loggers. Both
end in a single stderr handler whose formatter runs the structlog processor
chain, so every entry carries the same context and rendering. Stdout is left
for range files.

Rendering:
- Interactive terminals and development: human-readable console output
- Otherwise: JSON lines (TAXRANGE_JSON_LOGS=true forces JSON in development)
"""

import logging
import os
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from taxrange import __version__
from taxrange.config.models import TaxRangeConfig


def get_deployment_environment() -> str:
    """Get the environment name from TAXRANGE_ENV, defaulting to production."""
    return os.environ.get("TAXRANGE_ENV", "production").lower()


def _add_static_context(extra_fields: dict[str, Any]) -> Processor:
    """Build a processor that stamps fixed fields on every entry."""

    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.update(extra_fields)
        return event_dict

    return processor


def _log_level(config: TaxRangeConfig) -> int:
    return getattr(logging, config.logging.level.upper(), logging.INFO)


def _select_renderer(config: TaxRangeConfig, is_development: bool) -> Processor:
    json_logs = config.logging.json_logs
    if json_logs is None:
        # piped stderr (batch runs) gets JSON unless developing
        json_logs = not is_development and not sys.stderr.isatty()
    if is_development and os.environ.get("TAXRANGE_JSON_LOGS", "false").lower() == "true":
        json_logs = True

    if json_logs:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def _configure_processors(config: TaxRangeConfig, is_development: bool) -> list[Processor]:
    """Build the processor chain; the renderer is always the last element."""
    context = {
        "service": "taxrange",
        "version": __version__,
        "deployment": get_deployment_environment(),
    }
    context.update(config.logging.extra_fields)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_static_context(context),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="ISO"),
    ]
    if config.logging.include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder())

    processors.append(_select_renderer(config, is_development))
    return processors


def _configure_handlers(config: TaxRangeConfig, processors: list[Processor] | None = None) -> None:
    """Replace the root handlers with a single stderr handler.

    Args:
        config: Configuration with the log level
        processors: Processor chain used to format records. Without it records
            are written as plain messages.
    """
    level = _log_level(config)
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if processors:
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=processors[:-1],
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    processors[-1],
                ],
            )
        )
    else:
        handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)


def configure_structlog(config: TaxRangeConfig) -> None:
    """Configure logging for the command line tools.

    Args:
        config: The TaxRangeConfig instance containing logging settings.
    """
    environment = get_deployment_environment()
    processors = _configure_processors(config, environment == "development")

    structlog.configure(
        processors=[*processors[:-1], structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(_log_level(config)),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configure_handlers(config, processors)

    structlog.get_logger(__name__).debug(
        "Logging configured",
        log_level=config.logging.level,
        environment=environment,
        json_output=config.logging.json_logs,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name, usually the module ``__name__``

    Returns:
        A lazily configured structlog logger
    """
    return structlog.get_logger(name)
