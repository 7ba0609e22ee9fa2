"""
Contract Metadata Resolver

Turns a contract type into a validated, ordered list of operation
descriptors. Results (and failures) are memoized per contract type for the
lifetime of the process.
"""
import abc
import inspect
from typing import Any, Dict, Generic, Iterator, List, Protocol, Tuple

from service_client.contracts.descriptors import ContractDescriptor, OperationDescriptor
from service_client.contracts.markers import Disposable, get_alias, get_rpc_name
from service_client.core import metrics
from service_client.core.errors import (ConfigurationError,
                                        ConfigurationErrorKind,
                                        no_operations, not_an_interface)
from service_client.core.logging_config import LoggingConfig
from service_client.core.memo_cache import MemoCache

logger = LoggingConfig.get_logger(__name__)

# Bases that carry typing/abc plumbing rather than contract members
_PLUMBING_BASES = (object, Generic, Protocol, abc.ABC)

# Contract type -> ContractDescriptor
_contract_cache: MemoCache[type, ContractDescriptor] = MemoCache("contracts")


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _is_protocol_class(tp: type) -> bool:
    return bool(getattr(tp, "_is_protocol", False))


def _contract_bases(contract_type: type) -> Iterator[type]:
    for base in inspect.getmro(contract_type):
        if base in _PLUMBING_BASES:
            continue
        yield base


def _has_concrete_behavior(cls: type) -> bool:
    for name, value in vars(cls).items():
        if _is_dunder(name):
            continue
        member = value
        if isinstance(value, (staticmethod, classmethod)):
            member = value.__func__
        elif isinstance(value, property):
            member = value.fget
        elif not inspect.isroutine(value):
            # plain class attributes (constants) are not behavior
            continue
        if not getattr(member, "__isabstractmethod__", False):
            return True
    return False


def is_interface(contract_type: Any) -> bool:
    """
    True for a Protocol class, or an ABC whose members along the MRO are all
    abstract. Protocol bases are accepted as declared.
    """
    if not isinstance(contract_type, type):
        return False
    if _is_protocol_class(contract_type):
        return True
    if not isinstance(contract_type, abc.ABCMeta):
        return False
    for base in _contract_bases(contract_type):
        if _is_protocol_class(base):
            continue
        if _has_concrete_behavior(base):
            return False
    return True


def iter_contract_methods(contract_type: type) -> Iterator[Tuple[type, str, Any]]:
    """
    Yield (declaring type, member name, function) for every plain function
    visible on the contract, most-derived declarations first. A name declared
    again in a derived contract shadows the base declaration.
    """
    seen = set()
    for base in _contract_bases(contract_type):
        for name, value in vars(base).items():
            if name in seen or _is_dunder(name):
                continue
            seen.add(name)
            if inspect.isfunction(value):
                yield base, name, value


def _scan_contract(contract_type: type) -> ContractDescriptor:
    """Build the descriptor for one contract type (cache miss path)"""
    contract_name = contract_type.__qualname__
    if not is_interface(contract_type):
        raise not_an_interface(contract_name)

    operations: List[OperationDescriptor] = []
    by_local_name: Dict[str, OperationDescriptor] = {}
    skipped = 0

    for declaring_type, member_name, method in iter_contract_methods(contract_type):
        remote_name = get_rpc_name(method)
        if remote_name is None:
            skipped += 1
            continue

        op = OperationDescriptor(
            method=method,
            member_name=member_name,
            local_name=get_alias(method) or member_name,
            rpc_name=remote_name,
            declaring_type=declaring_type,
        )
        clash = by_local_name.get(op.local_name)
        if clash is not None:
            raise ConfigurationError(
                ConfigurationErrorKind.DUPLICATE_OPERATION,
                f"'{op.local_name}' is exposed by both {clash.qualified_name} and {op.qualified_name}",
                contract=contract_name,
                operation=op.local_name,
            )
        by_local_name[op.local_name] = op
        operations.append(op)

    if not operations:
        raise no_operations(contract_name)

    disposable = Disposable in inspect.getmro(contract_type)
    if disposable and "dispose" in by_local_name:
        raise ConfigurationError(
            ConfigurationErrorKind.DUPLICATE_OPERATION,
            f"'dispose' is reserved for disposable contracts but is exposed by {by_local_name['dispose'].qualified_name}",
            contract=contract_name,
            operation="dispose",
        )

    descriptor = ContractDescriptor(
        contract_type=contract_type,
        operations=tuple(operations),
        disposable=disposable,
    )
    logger.debug(
        f"Resolved contract {contract_name}: {len(operations)} operations, {skipped} members without rpc_name",
        extra={"contract": contract_name, "disposable": descriptor.disposable},
    )
    return descriptor


def _resolve_uncached(contract_type: type) -> ContractDescriptor:
    with LoggingConfig.scoped_context(contract=contract_type.__qualname__):
        try:
            descriptor = _scan_contract(contract_type)
        except ConfigurationError as e:
            metrics.record_resolution("failure")
            logger.error(f"Contract resolution failed: {e}", extra={"error": e.to_dict()})
            raise
        metrics.record_resolution("success")
        return descriptor


def resolve_contract(contract_type: type) -> ContractDescriptor:
    """
    Resolve a contract type into its descriptor.

    Idempotent and memoized: concurrent first callers wait for a single scan
    and all observe the same descriptor instance, or the same
    ConfigurationError.
    """
    if not isinstance(contract_type, type):
        raise not_an_interface(repr(contract_type))
    return _contract_cache.get_or_create(contract_type, _resolve_uncached)


def clear_contract_cache() -> None:
    """Forget resolved contracts (test isolation only)"""
    _contract_cache.clear()
