"""
Prometheus metrics configuration
"""
from prometheus_client import Counter

from service_client.core.config import get_settings

# ============================================================================
# Resolution / build metrics
# ============================================================================

contract_resolutions_total = Counter(
    'service_client_contract_resolutions_total',
    'Contract scans performed (cache misses only)',
    ['outcome']
)

strategy_builds_total = Counter(
    'service_client_strategy_builds_total',
    'Invocation strategies built (cache misses only)',
    ['outcome']
)

proxies_created_total = Counter(
    'service_client_proxies_created_total',
    'Proxy objects created',
    ['contract']
)

# ============================================================================
# Cache metrics
# ============================================================================

cache_lookups_total = Counter(
    'service_client_cache_lookups_total',
    'Memoization cache lookups',
    ['cache', 'result']
)


def _enabled() -> bool:
    return get_settings().enable_metrics


def record_resolution(outcome: str) -> None:
    if _enabled():
        contract_resolutions_total.labels(outcome=outcome).inc()


def record_strategy_build(outcome: str) -> None:
    if _enabled():
        strategy_builds_total.labels(outcome=outcome).inc()


def record_proxy_created(contract: str) -> None:
    if _enabled():
        proxies_created_total.labels(contract=contract).inc()


def record_cache_lookup(cache: str, hit: bool) -> None:
    if _enabled():
        cache_lookups_total.labels(cache=cache, result="hit" if hit else "miss").inc()
