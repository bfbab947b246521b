"""Tests for structured logging."""
import io
import json
import logging

from infrastructure.logging import StructuredLogger, get_logger


def capture(logger: StructuredLogger) -> io.StringIO:
    output = io.StringIO()
    logger.logger.handlers = [logger._setup_handler(output)]
    return output


def test_get_logger_uses_service_name(monkeypatch):
    monkeypatch.setenv("APP__SERVICE_NAME", "order-service")

    logger = get_logger()

    assert isinstance(logger, StructuredLogger)
    assert logger.service_name == "order-service"


def test_get_logger_takes_level_from_settings(monkeypatch):
    monkeypatch.setenv("APP__LOG_LEVEL", "WARNING")

    logger = get_logger("level-test")

    assert logger.logger.level == logging.WARNING


def test_info_includes_metadata_and_context():
    logger = StructuredLogger(service_name="test-service")
    output = capture(logger)

    logger.info("Order created", order_id="ord-456", total=30.0)

    entry = json.loads(output.getvalue().strip())
    assert entry["level"] == "INFO"
    assert entry["message"] == "Order created"
    assert entry["service"] == "test-service"
    assert "timestamp" in entry
    assert entry["order_id"] == "ord-456"
    assert entry["total"] == 30.0


def test_error_includes_exc_info():
    logger = StructuredLogger(service_name="test-service")
    output = capture(logger)

    try:
        raise ValueError("Quantity must be greater than 0")
    except ValueError:
        logger.error("Error occurred", exc_info=True)

    entry = json.loads(output.getvalue().strip())
    assert entry["level"] == "ERROR"
    assert "ValueError: Quantity must be greater than 0" in entry["exception"]


def test_debug_is_filtered_below_level():
    logger = StructuredLogger(service_name="test-service", level=logging.INFO)
    output = capture(logger)

    logger.debug("noisy")
    logger.warning("Warning message")

    lines = output.getvalue().strip().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["level"] == "WARNING"


def test_context_cannot_overwrite_reserved_fields():
    logger = StructuredLogger(service_name="test-service")
    output = capture(logger)

    logger.info("Order created", message="spoofed", level="DEBUG", service="other", order_id="ord-1")

    entry = json.loads(output.getvalue().strip())
    assert entry["message"] == "Order created"
    assert entry["level"] == "INFO"
    assert entry["service"] == "test-service"
    assert entry["order_id"] == "ord-1"
