"""
Runtime proxies for remote service contracts.

Declare a contract as a Protocol (or an all-abstract ABC), tag its remote
operations with @rpc_name, and turn any invoker into an object implementing
the contract:

    class ISampleService(Protocol):
        @rpc_name("sum")
        async def sum(self, p1: int, p2: int) -> int: ...

    svc = as_service_contract(invoker, ISampleService)
    result = await svc.sum(3, 4)
"""
from service_client.contracts import (ContractDescriptor, Disposable,
                                      OperationDescriptor, alias,
                                      resolve_contract, rpc_name)
from service_client.core.errors import (ConfigurationError,
                                        ConfigurationErrorKind)
from service_client.invocation import (MAX_ARITY, CancellationToken,
                                       InvocationStrategy, Invoker,
                                       build_strategy)
from service_client.proxy import ServiceProxy, as_service_contract, build_proxy

__version__ = "0.1.0"

__all__ = [
    "as_service_contract",
    "build_proxy",
    "resolve_contract",
    "build_strategy",
    "rpc_name",
    "alias",
    "Disposable",
    "CancellationToken",
    "Invoker",
    "ServiceProxy",
    "ContractDescriptor",
    "OperationDescriptor",
    "InvocationStrategy",
    "MAX_ARITY",
    "ConfigurationError",
    "ConfigurationErrorKind",
    "__version__",
]
