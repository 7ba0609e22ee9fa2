"""
Immutable metadata produced by the contract resolver and the strategy builder
"""
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class OperationDescriptor(BaseModel):
    """One remotely invocable member of a contract"""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: Callable[..., Any]  # identity: the declaring function object
    member_name: str
    local_name: str
    rpc_name: str
    declaring_type: type

    @property
    def qualified_name(self) -> str:
        return f"{self.declaring_type.__qualname__}.{self.member_name}"


class ContractDescriptor(BaseModel):
    """Resolved contract: ordered operations plus the disposal capability flag"""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    contract_type: type
    operations: Tuple[OperationDescriptor, ...]
    disposable: bool = False

    @property
    def name(self) -> str:
        return self.contract_type.__qualname__

    @property
    def local_names(self) -> Tuple[str, ...]:
        return tuple(op.local_name for op in self.operations)

    def get_operation(self, local_name: str) -> Optional[OperationDescriptor]:
        for op in self.operations:
            if op.local_name == local_name:
                return op
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Summary used in log records"""
        return {
            "contract": self.name,
            "disposable": self.disposable,
            "operations": {op.local_name: op.rpc_name for op in self.operations},
        }


class ReturnKind(str, Enum):
    """Pending-completion shapes a contract member may return"""
    VOID = "void"
    VALUE = "value"


class ReturnShape(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: ReturnKind
    result_type: Any = None

    @classmethod
    def void(cls) -> "ReturnShape":
        return cls(kind=ReturnKind.VOID)

    @classmethod
    def value(cls, result_type: Any) -> "ReturnShape":
        return cls(kind=ReturnKind.VALUE, result_type=result_type)
