"""
Tests for the package logging configuration
"""
import json
import logging

import pytest

from service_client.core.logging_config import (PACKAGE_LOGGER,
                                                ContextualFormatter,
                                                LoggingConfig,
                                                SensitiveDataFilter, log_context)


def _record(msg, args=None, **extra):
    record = logging.LogRecord(
        name="service_client.proxy.builder",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=args,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestSensitiveDataFilter:

    def test_masks_api_keys_and_tokens(self):
        record = _record("calling getUsage with api_key=abc123 token: xyz")

        assert SensitiveDataFilter().filter(record) is True
        assert "abc123" not in record.msg
        assert "xyz" not in record.msg
        assert "***" in record.msg

    def test_masks_string_arguments(self):
        record = _record("header %s", ("Bearer s3cr3t",))

        SensitiveDataFilter().filter(record)

        assert record.getMessage() == "header Bearer ***"

    def test_disabled_filter_keeps_message(self):
        record = _record("api_key=abc123")

        SensitiveDataFilter(enabled=False).filter(record)

        assert record.msg == "api_key=abc123"


class TestContextualFormatter:

    def test_json_output(self):
        output = json.loads(ContextualFormatter().format(_record("Created proxy")))

        assert output["message"] == "Created proxy"
        assert output["level"] == "INFO"
        assert output["logger"] == "service_client.proxy.builder"

    def test_context_and_extra_fields(self):
        with LoggingConfig.scoped_context(contract="ISampleService"):
            record = _record("Invoking sum", operation="sum", error={"kind": "no_operations"})
            output = json.loads(ContextualFormatter().format(record))

        assert output["contract"] == "ISampleService"
        assert output["operation"] == "sum"
        assert output["error"] == {"kind": "no_operations"}

    def test_unserializable_extra_is_stringified(self):
        record = _record("resolved", contract_type=object)

        output = json.loads(ContextualFormatter().format(record))

        assert output["contract_type"] == str(object)


class TestLoggingConfig:

    def test_package_logger_does_not_propagate(self):
        assert logging.getLogger(PACKAGE_LOGGER).propagate is False
        assert LoggingConfig.get_logger("service_client.proxy").name == "service_client.proxy"

    def test_module_level_override(self):
        module = "service_client.invocation.strategy"
        try:
            LoggingConfig.set_module_level(module, "debug")
            assert LoggingConfig.get_module_level(module) == "DEBUG"
        finally:
            logging.getLogger(module).setLevel(logging.NOTSET)

    def test_metrics_count_by_level(self):
        LoggingConfig.reset_metrics()
        logger = LoggingConfig.get_logger("service_client.tests")

        logger.warning("first")
        logger.error("second")
        logger.error("third")

        counts = LoggingConfig.get_metrics()
        assert counts["WARNING"] == 1
        assert counts["ERROR"] == 2

    def test_reset_metrics(self):
        LoggingConfig.get_logger("service_client.tests").error("counted")

        LoggingConfig.reset_metrics()

        assert set(LoggingConfig.get_metrics().values()) == {0}


class TestScopedContext:

    def test_context_is_restored_after_block(self):
        with LoggingConfig.scoped_context(contract="ISampleService"):
            assert log_context.get({}) == {"contract": "ISampleService"}

        assert log_context.get({}) == {}

    def test_nested_blocks_merge_and_unwind(self):
        with LoggingConfig.scoped_context(contract="ICalculator"):
            with LoggingConfig.scoped_context(operation="add"):
                assert log_context.get({}) == {"contract": "ICalculator", "operation": "add"}
            assert log_context.get({}) == {"contract": "ICalculator"}

    def test_context_is_restored_on_error(self):
        with pytest.raises(ValueError):
            with LoggingConfig.scoped_context(contract="IEmpty"):
                raise ValueError("scan failed")

        assert log_context.get({}) == {}
