"""
Invocation Strategy Builder

Turns one operation descriptor into a reusable callable that forwards a
proxy call to ``Invoker.invoke``. Strategies are memoized per declaring
function, so every proxy of every contract sharing that function reuses one
instance.
"""
import asyncio
import collections.abc
import inspect
import types
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from service_client.contracts.descriptors import (OperationDescriptor,
                                                  ReturnKind, ReturnShape)
from service_client.core import metrics
from service_client.core.errors import (ConfigurationError,
                                        ConfigurationErrorKind,
                                        unsupported_arity,
                                        unsupported_return_shape)
from service_client.core.logging_config import LoggingConfig
from service_client.core.memo_cache import MemoCache
from service_client.invocation.cancellation import CancellationToken

logger = LoggingConfig.get_logger(__name__)

# Hard limit on positional parameters, not counting a trailing cancellation token
MAX_ARITY = 8

_NONE_TYPE = type(None)

_PENDING_ORIGINS = (
    collections.abc.Awaitable,
    collections.abc.Coroutine,
    asyncio.Future,
)

Sender = Callable[[Any, str, Optional[List[Any]], Any, Any], Any]


def _send_void_no_args(invoker, method_name, args, cancellation, result_type):
    return invoker.invoke(method_name, None, cancellation)


def _send_void(invoker, method_name, args, cancellation, result_type):
    return invoker.invoke(method_name, args, cancellation)


def _send_value_no_args(invoker, method_name, args, cancellation, result_type):
    return invoker.invoke(method_name, None, cancellation, result_type=result_type)


def _send_value(invoker, method_name, args, cancellation, result_type):
    return invoker.invoke(method_name, args, cancellation, result_type=result_type)


# (has positional arguments, return kind) -> sender
_SENDERS: Dict[Tuple[bool, ReturnKind], Sender] = {
    (False, ReturnKind.VOID): _send_void_no_args,
    (True, ReturnKind.VOID): _send_void,
    (False, ReturnKind.VALUE): _send_value_no_args,
    (True, ReturnKind.VALUE): _send_value,
}


@dataclass(frozen=True)
class InvocationStrategy:
    """
    Arity-specific dispatch for one operation.

    Calling ``strategy(invoker, method_name, *args, **kwargs)`` binds the
    caller's arguments against the contract signature (defaults applied),
    splits off the cancellation token when the operation declares one, and
    returns ``invoker.invoke(...)`` untouched.
    """
    arity: int
    has_cancellation: bool
    return_shape: ReturnShape
    signature: inspect.Signature
    _send: Sender = field(repr=False, compare=False)

    def __call__(self, invoker: Any, method_name: str, *args: Any, **kwargs: Any) -> Any:
        bound = self.signature.bind(*args, **kwargs)
        bound.apply_defaults()
        values = list(bound.arguments.values())
        if self.has_cancellation:
            cancellation = values.pop()
        else:
            cancellation = CancellationToken.NONE
        return self._send(invoker, method_name, values, cancellation, self.return_shape.result_type)

    def bind(self, invoker: Any, method_name: str) -> Callable[..., Any]:
        """Callable forwarding to ``invoker`` under ``method_name``"""
        strategy = self

        def call(*args: Any, **kwargs: Any) -> Any:
            return strategy(invoker, method_name, *args, **kwargs)

        call.__signature__ = self.signature
        return call


def is_cancellation_annotation(annotation: Any) -> bool:
    """True for CancellationToken, a subclass, or Optional[...] of either"""
    if isinstance(annotation, type):
        return issubclass(annotation, CancellationToken)
    args = typing.get_args(annotation)
    if args and _is_union(annotation):
        members = [a for a in args if a is not _NONE_TYPE]
        return len(members) == 1 and is_cancellation_annotation(members[0])
    return False


def _is_union(annotation: Any) -> bool:
    origin = typing.get_origin(annotation)
    if origin is typing.Union:
        return True
    return origin is types.UnionType


def resolve_return_shape(method: Callable[..., Any], hints: Dict[str, Any]) -> Optional[ReturnShape]:
    """Return shape of a contract member, or None when it is not a pending shape"""
    has_annotation = "return" in hints
    annotation = hints.get("return")

    if inspect.iscoroutinefunction(method):
        if not has_annotation:
            return ReturnShape.value(Any)
        if annotation is _NONE_TYPE:
            return ReturnShape.void()
        return ReturnShape.value(annotation)

    if not has_annotation:
        return None

    origin = typing.get_origin(annotation) or annotation
    if origin not in _PENDING_ORIGINS:
        return None

    args = typing.get_args(annotation)
    if origin is collections.abc.Coroutine:
        result_type = args[2] if len(args) == 3 else None
    else:
        result_type = args[0] if args else None

    if result_type is None or result_type is _NONE_TYPE:
        return ReturnShape.void()
    return ReturnShape.value(result_type)


def _call_parameters(op: OperationDescriptor, contract: str) -> List[inspect.Parameter]:
    params = list(inspect.signature(op.method).parameters.values())
    if not params or params[0].kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        raise unsupported_arity(contract, op.member_name, "missing 'self' parameter")
    params = params[1:]
    for p in params:
        if p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            raise unsupported_arity(contract, op.member_name, f"variadic parameter '{p.name}'")
    return params


def _build_strategy(op: OperationDescriptor) -> InvocationStrategy:
    contract = op.declaring_type.__qualname__
    params = _call_parameters(op, contract)

    try:
        hints = typing.get_type_hints(op.method)
    except Exception as e:
        raise ConfigurationError(
            ConfigurationErrorKind.UNRESOLVED_ANNOTATION,
            f"cannot evaluate annotations: {e}",
            contract=contract,
            operation=op.member_name,
        ) from e

    has_cancellation = bool(params) and is_cancellation_annotation(hints.get(params[-1].name))
    arity = len(params) - (1 if has_cancellation else 0)
    if arity > MAX_ARITY:
        raise unsupported_arity(contract, op.member_name, f"{arity} parameters (at most {MAX_ARITY} supported)")

    return_shape = resolve_return_shape(op.method, hints)
    if return_shape is None:
        raise unsupported_return_shape(contract, op.member_name, hints.get("return", inspect.Signature.empty))

    if has_cancellation and params[-1].default is inspect.Parameter.empty:
        params[-1] = params[-1].replace(default=CancellationToken.NONE)

    return InvocationStrategy(
        arity=arity,
        has_cancellation=has_cancellation,
        return_shape=return_shape,
        signature=inspect.Signature(params),
        _send=_SENDERS[(arity > 0, return_shape.kind)],
    )


# Declaring function -> InvocationStrategy
_strategy_cache: MemoCache[Callable[..., Any], InvocationStrategy] = MemoCache("strategies")


def build_strategy(op: OperationDescriptor) -> InvocationStrategy:
    """
    Get (building on first use) the invocation strategy for an operation.

    Raises:
        ConfigurationError: unsupported arity, return shape or annotations.
            The failure is cached with the operation.
    """

    def factory(_method: Callable[..., Any]) -> InvocationStrategy:
        with LoggingConfig.scoped_context(contract=op.declaring_type.__qualname__, operation=op.member_name):
            try:
                strategy = _build_strategy(op)
            except ConfigurationError as e:
                metrics.record_strategy_build("failure")
                logger.error(f"Strategy build failed: {e}", extra={"error": e.to_dict()})
                raise
            metrics.record_strategy_build("success")
            logger.debug(
                f"Built strategy for {op.qualified_name}: arity={strategy.arity}, "
                f"cancellation={strategy.has_cancellation}, returns={strategy.return_shape.kind.value}"
            )
            return strategy

    return _strategy_cache.get_or_create(op.method, factory)


def build_strategies(ops: Sequence[OperationDescriptor]) -> Tuple[InvocationStrategy, ...]:
    return tuple(build_strategy(op) for op in ops)


def clear_strategy_cache() -> None:
    """Forget built strategies (test isolation only)"""
    _strategy_cache.clear()
