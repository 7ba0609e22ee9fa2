"""
The invoker capability proxies forward to.

Transport, encoding and error mapping live behind this protocol; proxies only
ever call ``invoke`` and ``dispose``.
"""
from typing import Any, Awaitable, Optional, Protocol, Sequence, runtime_checkable

from service_client.invocation.cancellation import CancellationToken


@runtime_checkable
class Invoker(Protocol):
    """Generic remote-invocation engine"""

    def invoke(
        self,
        method_name: str,
        args: Optional[Sequence[Any]] = None,
        cancellation: Optional[CancellationToken] = None,
        *,
        result_type: Any = None,
    ) -> Awaitable[Any]:
        """
        Call ``method_name`` remotely.

        Args:
            method_name: Remote method name
            args: Positional arguments, or None for zero-argument calls
            cancellation: Handle supplied by the proxy caller
            result_type: Expected result type; omitted for void operations

        Returns:
            Pending value resolving to the remote result
        """
        ...

    def dispose(self) -> None:
        """Release the underlying connection"""
        ...
