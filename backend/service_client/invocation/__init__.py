"""
Invoker boundary and per-operation invocation strategies
"""
from service_client.invocation.cancellation import CancellationToken
from service_client.invocation.invoker import Invoker
from service_client.invocation.strategy import (MAX_ARITY, InvocationStrategy,
                                                build_strategy)

__all__ = ["CancellationToken", "Invoker", "InvocationStrategy", "MAX_ARITY", "build_strategy"]
