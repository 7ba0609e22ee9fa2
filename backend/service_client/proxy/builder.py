"""
Proxy Object Builder

Pairs a resolved contract with one invoker. Each proxy carries a read-only
dispatch table (local name -> bound callable); its class is generated once
per contract as a subclass of the contract, so the proxy is a nominal subtype
of the contract and every abstract member is implemented.
"""
import inspect
import types
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Type, TypeVar

from service_client.contracts.descriptors import ContractDescriptor, OperationDescriptor
from service_client.contracts.resolver import iter_contract_methods, resolve_contract
from service_client.core import metrics
from service_client.core.config import get_settings
from service_client.core.logging_config import LoggingConfig
from service_client.core.memo_cache import MemoCache
from service_client.invocation.invoker import Invoker
from service_client.invocation.strategy import InvocationStrategy, build_strategies

logger = LoggingConfig.get_logger(__name__)

T = TypeVar('T')

DISPOSE = "dispose"


class ServiceProxy:
    """Base of every generated proxy class"""

    __contract__: ContractDescriptor

    def __init__(self, invoker: Any, dispatch: Mapping[str, Callable[..., Any]]):
        object.__setattr__(self, "_invoker", invoker)
        object.__setattr__(self, "_dispatch", MappingProxyType(dict(dispatch)))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__qualname__} is read-only; cannot set '{name}'")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__qualname__} is read-only; cannot delete '{name}'")

    def __repr__(self) -> str:
        return f"<{type(self).__qualname__} invoker={self._invoker!r}>"


def _make_forwarder(local_name: str, method: Callable[..., Any]) -> Callable[..., Any]:
    def forward(self, *args, **kwargs):
        return self._dispatch[local_name](*args, **kwargs)

    # Not functools.wraps: copying __dict__ would carry __isabstractmethod__ over
    forward.__name__ = local_name
    forward.__doc__ = method.__doc__
    return forward


def _make_stub(name: str, contract_name: str, member: Any = None) -> Any:
    """Placeholder for a contract member that is not a remote operation, of the same kind as ``member``"""
    message = f"{contract_name}.{name} is not a remote operation (no @rpc_name)"

    def stub(self, *args, **kwargs):
        raise NotImplementedError(message)

    stub.__name__ = name
    if isinstance(member, property):
        return property(stub, doc=member.__doc__)
    return stub


def _dispose(self) -> None:
    self._dispatch[DISPOSE]()


def _enter(self):
    return self


def _exit(self, exc_type, exc, tb) -> None:
    self._dispatch[DISPOSE]()


def _make_proxy_class(contract: ContractDescriptor) -> type:
    contract_type = contract.contract_type
    namespace: Dict[str, Any] = {
        "__contract__": contract,
        "__module__": contract_type.__module__,
        "__qualname__": f"{contract_type.__qualname__}Proxy",
    }

    local_names = set(contract.local_names)
    for op in contract.operations:
        forwarder = _make_forwarder(op.local_name, op.method)
        namespace[op.local_name] = forwarder
        # An aliased operation still answers to its declared member name
        if op.member_name not in local_names:
            namespace[op.member_name] = forwarder

    if contract.disposable:
        namespace[DISPOSE] = _dispose
        namespace["__enter__"] = _enter
        namespace["__exit__"] = _exit

    for _declaring, name, method in iter_contract_methods(contract_type):
        if name not in namespace:
            namespace[name] = _make_stub(name, contract.name, method)
    for base in inspect.getmro(contract_type):
        for name, member in vars(base).items():
            if isinstance(member, property) and name not in namespace:
                namespace[name] = _make_stub(name, contract.name, member)
    for name in getattr(contract_type, "__abstractmethods__", ()):
        if name not in namespace:
            namespace[name] = _make_stub(name, contract.name, inspect.getattr_static(contract_type, name, None))

    proxy_cls = types.new_class(
        f"{contract_type.__name__}Proxy",
        (ServiceProxy, contract_type),
        exec_body=lambda ns: ns.update(namespace),
    )
    logger.debug(f"Generated proxy class {proxy_cls.__qualname__}")
    return proxy_cls


# Contract type -> generated proxy class
_proxy_class_cache: MemoCache[type, type] = MemoCache("proxy_classes")


def _bind_operation(op: OperationDescriptor, strategy: InvocationStrategy, invoker: Any) -> Callable[..., Any]:
    call = strategy.bind(invoker, op.rpc_name)
    settings = get_settings()
    if not settings.log_invocations:
        return call
    include_arguments = settings.log_sensitive_data

    def logged_call(*args: Any, **kwargs: Any) -> Any:
        extra = {"operation": op.local_name, "rpc_name": op.rpc_name}
        if include_arguments:
            extra["arguments"] = {"args": list(args), "kwargs": dict(kwargs)}
        logger.debug(f"Invoking {op.rpc_name} via {op.local_name}", extra=extra)
        return call(*args, **kwargs)

    logged_call.__signature__ = call.__signature__
    return logged_call


def _forward_dispose(invoker: Any) -> Callable[[], None]:
    def dispose() -> None:
        invoker.dispose()

    return dispose


def build_proxy(contract: ContractDescriptor, invoker: Any) -> Any:
    """
    Build a proxy for an already resolved contract.

    Strategies for every operation are resolved (building on first use)
    before the proxy exists, so declaration mistakes surface here.
    """
    strategies = build_strategies(contract.operations)
    proxy_cls = _proxy_class_cache.get_or_create(
        contract.contract_type, lambda _contract_type: _make_proxy_class(contract)
    )

    dispatch: Dict[str, Callable[..., Any]] = {}
    for op, strategy in zip(contract.operations, strategies):
        dispatch[op.local_name] = _bind_operation(op, strategy, invoker)
    if contract.disposable:
        dispatch[DISPOSE] = _forward_dispose(invoker)

    proxy = proxy_cls(invoker, dispatch)
    metrics.record_proxy_created(contract.name)
    logger.debug(f"Created {proxy_cls.__qualname__} with {len(contract.operations)} operations")
    return proxy


def as_service_contract(invoker: Invoker, contract_type: Type[T]) -> T:
    """
    Return an object implementing ``contract_type`` whose remote operations
    forward to ``invoker``.

    Args:
        invoker: Engine performing the remote calls
        contract_type: Protocol or all-abstract ABC with @rpc_name members

    Raises:
        ValueError: invoker is None
        ConfigurationError: the contract or one of its operations is invalid
    """
    if invoker is None:
        raise ValueError("invoker is required")
    contract = resolve_contract(contract_type)
    return build_proxy(contract, invoker)


def get_dispatch_table(proxy: ServiceProxy) -> Mapping[str, Callable[..., Any]]:
    """Read-only view of a proxy's local name -> callable table"""
    return proxy._dispatch


def clear_proxy_class_cache() -> None:
    """Forget generated proxy classes (test isolation only)"""
    _proxy_class_cache.clear()
