"""
Contract declaration markers and metadata resolution
"""
from service_client.contracts.descriptors import (ContractDescriptor,
                                                  OperationDescriptor,
                                                  ReturnKind, ReturnShape)
from service_client.contracts.markers import Disposable, alias, rpc_name
from service_client.contracts.resolver import is_interface, resolve_contract

__all__ = [
    "ContractDescriptor",
    "OperationDescriptor",
    "ReturnKind",
    "ReturnShape",
    "Disposable",
    "alias",
    "rpc_name",
    "is_interface",
    "resolve_contract",
]
