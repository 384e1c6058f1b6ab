import logging
from dataclasses import dataclass
from typing import Optional

from ..addresses import normalize_address
from ..errors import AuthorizationError, NotFoundError, collaborator_step
from ..models import PoolPartnerInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizationDecision:
    permitted: bool
    expected: Optional[str]
    actual: str
    skipped: bool = False


class AuthorizationGuard:
    """
    Checks that a caller is the partner (fee claimer) declared in a bonding
    curve pool's configuration.
    """

    def __init__(self, bonding_curve_sdk):
        self.sdk = bonding_curve_sdk

    def get_partner_info(self, pool_address: str) -> PoolPartnerInfo:
        pool_address = normalize_address(pool_address, 'pool')
        with collaborator_step('get_partner_info'):
            pool = self.sdk.get_pool(pool_address)
        if pool is None:
            raise NotFoundError(f'Pool not found: {pool_address}', address=pool_address)

        if not pool.config:
            logger.warning(f'Pool {pool_address} has no config reference')
            return PoolPartnerInfo(partner_address=None, config_address=None)

        with collaborator_step('get_partner_info'):
            pool_config = self.sdk.get_pool_config(pool.config)
        if pool_config is None:
            raise NotFoundError(f'Pool config not found: {pool.config}', address=pool.config)

        partner = pool_config.fee_claimer
        logger.info(f'Pool {pool_address} config {pool.config} partner/fee claimer: {partner}')
        return PoolPartnerInfo(partner_address=partner, config_address=pool.config)

    def check_partner(self, pool_address: str, caller: str, skip_validation: bool = False) -> AuthorizationDecision:
        actual = normalize_address(caller, 'caller')
        if skip_validation:
            logger.warning(f'⚠️ Partner validation skipped for pool {pool_address} (caller {actual})')
            return AuthorizationDecision(permitted=True, expected=None, actual=actual, skipped=True)

        expected = self.get_partner_info(pool_address).partner_address
        if not expected:
            logger.warning(f'No partner address found for pool {pool_address}')
            return AuthorizationDecision(permitted=False, expected=None, actual=actual)

        permitted = expected == actual
        logger.info(f'Wallet {actual} is partner for {pool_address}: {permitted}')
        return AuthorizationDecision(permitted=permitted, expected=expected, actual=actual)

    def is_partner_for_pool(self, pool_address: str, caller: str) -> bool:
        return self.check_partner(pool_address, caller).permitted

    def require_partner(self, pool_address: str, caller: str, skip_validation: bool = False) -> AuthorizationDecision:
        decision = self.check_partner(pool_address, caller, skip_validation=skip_validation)
        if not decision.permitted:
            raise AuthorizationError(
                'Only the designated partner can claim platform fees. '
                f"Expected partner: {decision.expected or 'unknown'}, connected wallet: {decision.actual}",
                expected=decision.expected,
                actual=decision.actual,
            )
        if not decision.skipped:
            logger.info('✅ Partner validation passed')
        return decision
