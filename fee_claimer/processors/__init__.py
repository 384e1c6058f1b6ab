from .token_program_resolver import TokenProgramResolver
from .authorization_guard import AuthorizationGuard, AuthorizationDecision
from .pool_locator import PoolLocator
from .fee_metrics_reader import FeeMetricsReader

__all__ = ['TokenProgramResolver', 'AuthorizationGuard', 'AuthorizationDecision', 'PoolLocator', 'FeeMetricsReader']
