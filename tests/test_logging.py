"""Tests for structured logging configuration."""

from decimal import Decimal

import orjson
import structlog

from fedtax.core.config import settings
from fedtax.core.logging import (
    _add_context_vars,
    _orjson_serializer,
    configure_logging,
    request_id_ctx,
    tax_year_ctx,
)
from fedtax.tax.year_config import FilingStatus

def _reset_structlog() -> None:
    """Reset structlog defaults to avoid test cross-talk."""
    structlog.reset_defaults()

def test_configure_logging_uses_json_when_log_format_json() -> None:
    """Use JSON logging when log_format=json, even in development."""
    original_env = settings.environment
    original_format = getattr(settings, "log_format", None)

    try:
        settings.environment = "development"
        settings.log_format = "json"
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert any(
            isinstance(processor, structlog.processors.JSONRenderer)
            for processor in processors
        )
        assert any(
            isinstance(processor, structlog.processors.EventRenamer)
            for processor in processors
        )
    finally:
        settings.environment = original_env
        settings.log_format = original_format
        _reset_structlog()

def test_configure_logging_uses_console_when_log_format_console() -> None:
    """Use console logging when log_format=console in development."""
    original_env = settings.environment
    original_format = getattr(settings, "log_format", None)

    try:
        settings.environment = "development"
        settings.log_format = "console"
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert any(
            isinstance(processor, structlog.dev.ConsoleRenderer)
            for processor in processors
        )
        assert not any(
            isinstance(processor, structlog.processors.JSONRenderer)
            for processor in processors
        )
    finally:
        settings.environment = original_env
        settings.log_format = original_format
        _reset_structlog()

def test_configure_logging_defaults_to_json_outside_development() -> None:
    """Production without an override logs JSON."""
    original_env = settings.environment
    original_format = getattr(settings, "log_format", None)

    try:
        settings.environment = "production"
        settings.log_format = None
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert any(
            isinstance(processor, structlog.processors.JSONRenderer)
            for processor in processors
        )
    finally:
        settings.environment = original_env
        settings.log_format = original_format
        _reset_structlog()

def test_context_vars_added_to_events() -> None:
    """Request ID and tax year are attached when set."""
    request_token = request_id_ctx.set("req-42")
    year_token = tax_year_ctx.set(2025)
    try:
        event = _add_context_vars(None, "info", {"event": "return_calculated"})
    finally:
        request_id_ctx.reset(request_token)
        tax_year_ctx.reset(year_token)

    assert event["request_id"] == "req-42"
    assert event["tax_year"] == 2025

def test_context_vars_absent_when_unset() -> None:
    event = _add_context_vars(None, "info", {"event": "startup"})

    assert "request_id" not in event
    assert "tax_year" not in event

def test_orjson_serializer_keeps_decimal_cents() -> None:
    """Decimal amounts are written as exact strings."""
    rendered = _orjson_serializer({"total_tax": Decimal("3961.50")})

    assert orjson.loads(rendered) == {"total_tax": "3961.50"}

def test_orjson_serializer_writes_enum_values() -> None:
    """Filing status enums are logged by value."""
    rendered = _orjson_serializer({"filing_status": FilingStatus.HEAD_OF_HOUSEHOLD})

    assert orjson.loads(rendered) == {"filing_status": "head-of-household"}

def test_json_pipeline_has_no_stack_renderer() -> None:
    """Only the processors the estimator uses are installed."""
    original_env = settings.environment
    original_format = getattr(settings, "log_format", None)

    try:
        settings.environment = "production"
        settings.log_format = None
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert not any(
            isinstance(processor, structlog.processors.StackInfoRenderer)
            for processor in processors
        )
        assert _add_context_vars in processors
    finally:
        settings.environment = original_env
        settings.log_format = original_format
        _reset_structlog()
