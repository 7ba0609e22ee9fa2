"""
Pytest configuration and fixtures
"""
import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from service_client.contracts.resolver import clear_contract_cache
from service_client.invocation.strategy import clear_strategy_cache
from service_client.proxy.builder import clear_proxy_class_cache


@pytest.fixture(autouse=True)
def fresh_caches():
    """Every test starts with empty process-wide memo tables"""
    clear_contract_cache()
    clear_strategy_cache()
    clear_proxy_class_cache()
    yield
    clear_contract_cache()
    clear_strategy_cache()
    clear_proxy_class_cache()


@pytest.fixture
def invoker():
    """Synchronous fake invoker; invoke() returns whatever the test configures"""
    fake = Mock(spec=["invoke", "dispose"])
    fake.invoke.return_value = object()
    return fake


@pytest.fixture
def async_invoker():
    """Fake invoker whose invoke() returns an awaitable"""
    fake = Mock(spec=["invoke", "dispose"])
    fake.invoke = AsyncMock()
    return fake
