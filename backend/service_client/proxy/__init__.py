"""
Proxy objects implementing service contracts
"""
from service_client.proxy.builder import (ServiceProxy, as_service_contract,
                                          build_proxy)

__all__ = ["ServiceProxy", "as_service_contract", "build_proxy"]
