"""
Configuration error classification for contract resolution and proxy building
"""
from enum import Enum
from typing import Any, Dict, Optional


class ConfigurationErrorKind(str, Enum):
    """Reasons a contract, operation or proxy cannot be built"""
    NOT_AN_INTERFACE = "not_an_interface"
    NO_OPERATIONS = "no_operations"
    UNSUPPORTED_RETURN_SHAPE = "unsupported_return_shape"
    UNSUPPORTED_ARITY = "unsupported_arity"
    DUPLICATE_OPERATION = "duplicate_operation"
    UNRESOLVED_ANNOTATION = "unresolved_annotation"


class ConfigurationError(Exception):
    """
    A contract declaration mistake detected while resolving or building.

    These are programming errors: they are raised on first use, cached with
    the failed build and never retried.
    """

    def __init__(
        self,
        kind: ConfigurationErrorKind,
        message: str,
        contract: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        self.kind = kind
        self.message = message
        self.contract = contract
        self.operation = operation
        super().__init__(self._render())

    def _render(self) -> str:
        where = self.contract or "<unknown contract>"
        if self.operation:
            where = f"{where}.{self.operation}"
        return f"{where}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary"""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "contract": self.contract,
            "operation": self.operation,
        }


def not_an_interface(contract: str) -> ConfigurationError:
    return ConfigurationError(ConfigurationErrorKind.NOT_AN_INTERFACE, "not an interface", contract=contract)


def no_operations(contract: str) -> ConfigurationError:
    return ConfigurationError(
        ConfigurationErrorKind.NO_OPERATIONS,
        "no operations found (mark members with @rpc_name)",
        contract=contract,
    )


def unsupported_return_shape(contract: str, operation: str, annotation: Any) -> ConfigurationError:
    return ConfigurationError(
        ConfigurationErrorKind.UNSUPPORTED_RETURN_SHAPE,
        f"unsupported return shape {annotation!r}; declare 'async def' or return Awaitable[T]",
        contract=contract,
        operation=operation,
    )


def unsupported_arity(contract: str, operation: str, detail: str) -> ConfigurationError:
    return ConfigurationError(
        ConfigurationErrorKind.UNSUPPORTED_ARITY,
        f"unsupported arity: {detail}",
        contract=contract,
        operation=operation,
    )
