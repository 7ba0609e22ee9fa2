"""
Declarative markers read by the contract resolver
"""
from typing import Any, Callable, Optional, Protocol, TypeVar

F = TypeVar('F', bound=Callable[..., Any])

RPC_NAME_ATTR = "__rpc_name__"
ALIAS_ATTR = "__rpc_alias__"


def _check_name(name: str, what: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"{what} must be a non-empty string")
    return name


def rpc_name(name: str) -> Callable[[F], F]:
    """Mark a contract member as a remote operation called ``name`` on the wire.

    Members without this marker are not exposed by proxies. Works in either
    order with ``@abc.abstractmethod`` since the function itself is tagged.
    """
    _check_name(name, "rpc_name")

    def decorator(method: F) -> F:
        setattr(method, RPC_NAME_ATTR, name)
        return method

    return decorator


def alias(name: str) -> Callable[[F], F]:
    """Expose a remote operation on the proxy under ``name``."""
    _check_name(name, "alias")

    def decorator(method: F) -> F:
        setattr(method, ALIAS_ATTR, name)
        return method

    return decorator


def get_rpc_name(method: Any) -> Optional[str]:
    return getattr(method, RPC_NAME_ATTR, None)


def get_alias(method: Any) -> Optional[str]:
    return getattr(method, ALIAS_ATTR, None)


class Disposable(Protocol):
    """Capability marker: proxies of contracts extending this forward dispose() to the invoker."""

    def dispose(self) -> None:
        ...
