"""
Tests for declaration markers, cancellation handles and configuration errors
"""
import pytest

from service_client import (CancellationToken, ConfigurationError,
                            ConfigurationErrorKind, alias, rpc_name)
from service_client.contracts.markers import get_alias, get_rpc_name
from service_client.core.errors import no_operations, unsupported_arity


class TestMarkers:

    def test_rpc_name_tags_function(self):
        @rpc_name("remote.method")
        def method(self):
            ...

        assert get_rpc_name(method) == "remote.method"
        assert get_alias(method) is None

    def test_alias_tags_function(self):
        @alias("plus")
        def add(self, a, b):
            ...

        assert get_alias(add) == "plus"
        assert get_rpc_name(add) is None

    @pytest.mark.parametrize("decorator", [rpc_name, alias])
    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_empty_names_are_rejected(self, decorator, name):
        with pytest.raises(ValueError):
            decorator(name)


class TestCancellationToken:

    def test_none_token(self):
        assert CancellationToken.NONE.can_be_cancelled is False
        assert CancellationToken.NONE.is_cancellation_requested is False
        assert repr(CancellationToken.NONE) == "CancellationToken.NONE"

        with pytest.raises(RuntimeError):
            CancellationToken.NONE.cancel()

    def test_cancel(self):
        token = CancellationToken.create()
        assert token.can_be_cancelled is True
        assert token.is_cancellation_requested is False

        token.cancel()

        assert token.is_cancellation_requested is True
        assert "cancelled=True" in repr(token)


class TestConfigurationError:

    def test_message_names_contract_and_operation(self):
        error = unsupported_arity("ISampleService", "sum", "9 parameters")

        assert str(error) == "ISampleService.sum: unsupported arity: 9 parameters"
        assert error.kind == ConfigurationErrorKind.UNSUPPORTED_ARITY

    def test_to_dict(self):
        error = no_operations("IEmpty")

        assert error.to_dict() == {
            "kind": "no_operations",
            "message": "no operations found (mark members with @rpc_name)",
            "contract": "IEmpty",
            "operation": None,
        }

    def test_unknown_contract(self):
        error = ConfigurationError(ConfigurationErrorKind.NOT_AN_INTERFACE, "not an interface")

        assert str(error) == "<unknown contract>: not an interface"
