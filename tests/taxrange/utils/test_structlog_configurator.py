import json
import logging
import os
import sys
from unittest.mock import MagicMock

from taxrange import __version__
from taxrange.config import LoggingConfig, TaxRangeConfig
from taxrange.utils.structlog_configurator import (
    _add_static_context,
    _configure_handlers,
    _configure_processors,
    configure_structlog,
    get_deployment_environment,
    get_logger,
)


def renderer_name(processors):
    return type(processors[-1]).__name__


class TestDeploymentEnvironment:
    """Test deployment environment detection."""

    def test_get_deployment_environment_default(self, mocker):
        """Should return 'production' when TAXRANGE_ENV is not set."""
        mocker.patch.dict(os.environ, {}, clear=True)
        assert get_deployment_environment() == "production"

    def test_get_deployment_environment_development(self, mocker):
        """Should return the lowercased TAXRANGE_ENV value."""
        mocker.patch.dict(os.environ, {"TAXRANGE_ENV": "Development"})
        assert get_deployment_environment() == "development"


class TestStaticContextProcessor:
    """Test static context processor function."""

    def test_add_static_context_processor(self):
        """Should add extra fields to event dict."""
        extra_fields = {"service": "test", "version": "1.0"}
        processor = _add_static_context(extra_fields)

        event_dict = {"event": "test message"}
        result = processor(MagicMock(), "info", event_dict)

        assert result["service"] == "test"
        assert result["version"] == "1.0"
        assert result["event"] == "test message"


class TestProcessorConfiguration:
    """Test processor configuration logic."""

    def test_configure_processors_basic(self, mocker):
        """Should render human-readable output on interactive terminals."""
        mock_sys = mocker.patch("taxrange.utils.structlog_configurator.sys")
        mock_sys.stderr.isatty.return_value = True
        config = TaxRangeConfig()

        processors = _configure_processors(config, False)

        assert len(processors) >= 4
        assert renderer_name(processors) == "ConsoleRenderer"

    def test_configure_processors_json_output(self, mocker):
        """Should render JSON in production when stderr is not a terminal."""
        mock_sys = mocker.patch("taxrange.utils.structlog_configurator.sys")
        mock_sys.stderr.isatty.return_value = False
        config = TaxRangeConfig()

        processors = _configure_processors(config, False)

        assert renderer_name(processors) == "JSONRenderer"

    def test_configure_processors_explicit_json(self, mocker):
        """Should follow json_logs when it is set."""
        mock_sys = mocker.patch("taxrange.utils.structlog_configurator.sys")
        mock_sys.stderr.isatty.return_value = False
        config = TaxRangeConfig(logging=LoggingConfig(json_logs=False))

        assert renderer_name(_configure_processors(config, False)) == "ConsoleRenderer"

    def test_configure_processors_development(self, mocker):
        """Should render human-readable output in development."""
        mock_sys = mocker.patch("taxrange.utils.structlog_configurator.sys")
        mock_sys.stderr.isatty.return_value = False
        mocker.patch.dict(os.environ, {}, clear=True)
        config = TaxRangeConfig()

        assert renderer_name(_configure_processors(config, True)) == "ConsoleRenderer"

    def test_configure_processors_development_json(self, mocker):
        """Should render JSON in development when TAXRANGE_JSON_LOGS is set."""
        mocker.patch.dict(os.environ, {"TAXRANGE_JSON_LOGS": "true"})
        config = TaxRangeConfig()

        assert renderer_name(_configure_processors(config, True)) == "JSONRenderer"

    def test_configure_processors_include_caller(self, mocker):
        """Should add call site parameters when include_caller is set."""
        mock_sys = mocker.patch("taxrange.utils.structlog_configurator.sys")
        mock_sys.stderr.isatty.return_value = True
        config = TaxRangeConfig(logging=LoggingConfig(include_caller=True))

        processors = _configure_processors(config, False)

        assert any("CallsiteParameterAdder" in str(type(p)) for p in processors)

    def test_configure_processors_static_context(self, mocker):
        """Should add version, deployment and configured fields to every entry."""
        mocker.patch(
            "taxrange.utils.structlog_configurator.get_deployment_environment",
            return_value="test",
        )
        config = TaxRangeConfig(logging=LoggingConfig(extra_fields={"service": "imp-points"}))

        processors = _configure_processors(config, False)
        event_dict = processors[1](MagicMock(), "info", {"event": "imported"})

        assert event_dict["service"] == "imp-points"
        assert event_dict["version"] == __version__
        assert event_dict["deployment"] == "test"


class TestHandlerConfiguration:
    """Test logging handler configuration."""

    def test_configure_handlers_console(self, mocker):
        """Should replace root handlers with a stderr handler."""
        config = TaxRangeConfig(logging=LoggingConfig(level="warning"))
        mock_logger = mocker.patch("logging.getLogger")
        mock_root = MagicMock()
        mock_logger.return_value = mock_root
        old_handler = MagicMock()
        mock_root.handlers = [old_handler]

        _configure_handlers(config)

        mock_root.removeHandler.assert_called_once_with(old_handler)
        mock_root.setLevel.assert_called_once_with(logging.WARNING)
        handler = mock_root.addHandler.call_args.args[0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream is sys.stderr

    def test_configure_handlers_unknown_level(self, mocker):
        """Should fall back to INFO for unknown level names."""
        config = TaxRangeConfig(logging=LoggingConfig(level="chatty"))
        mock_logger = mocker.patch("logging.getLogger")
        mock_root = MagicMock()
        mock_logger.return_value = mock_root
        mock_root.handlers = []

        _configure_handlers(config)

        mock_root.setLevel.assert_called_once_with(logging.INFO)

    def test_configure_handlers_formats_library_records(self, mocker):
        """Should render standard logging records with the structlog chain."""
        config = TaxRangeConfig(logging=LoggingConfig(json_logs=True))
        mock_logger = mocker.patch("logging.getLogger")
        mock_root = MagicMock()
        mock_logger.return_value = mock_root
        mock_root.handlers = []

        _configure_handlers(config, _configure_processors(config, False))

        handler = mock_root.addHandler.call_args.args[0]
        record = logging.LogRecord(
            "taxrange.ranges.tsv", logging.INFO, __file__, 1, "Read %d taxa", (3,), None
        )
        entry = json.loads(handler.format(record))
        assert entry["event"] == "Read 3 taxa"
        assert entry["level"] == "info"
        assert entry["service"] == "taxrange"
        assert "timestamp" in entry


class TestMainConfiguration:
    """Test main configuration function."""

    def test_configure_structlog(self, mocker):
        """Should configure structlog successfully."""
        config = TaxRangeConfig()

        mocker.patch(
            "taxrange.utils.structlog_configurator._configure_processors", return_value=[]
        )
        mock_configure = mocker.patch("structlog.configure")
        mock_handlers = mocker.patch("taxrange.utils.structlog_configurator._configure_handlers")
        mock_get_logger = mocker.patch("structlog.get_logger")
        mock_logger = MagicMock()
        mock_get_logger.return_value = mock_logger

        configure_structlog(config)

        mock_configure.assert_called_once()
        mock_handlers.assert_called_once_with(config, [])
        mock_logger.debug.assert_called_once()

    def test_get_logger(self, mocker):
        """Should return structlog logger instance."""
        mock_structlog = mocker.patch("structlog.get_logger")
        mock_logger = MagicMock()
        mock_structlog.return_value = mock_logger

        result = get_logger("test")

        mock_structlog.assert_called_once_with("test")
        assert result == mock_logger
