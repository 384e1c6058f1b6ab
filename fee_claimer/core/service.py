import logging
from typing import List, Optional

from ..addresses import normalize_address
from ..config import Config
from ..errors import NotFoundError, ValidationError, collaborator_step
from ..models import ClaimBounds, FeeMetricsSnapshot, Pool, PoolPartnerInfo, Position
from ..processors import AuthorizationGuard, FeeMetricsReader, PoolLocator, TokenProgramResolver
from .claim_workflow import ClaimWorkflow
from .split_workflow import SplitTransferWorkflow

logger = logging.getLogger(__name__)


class FeeClaimerService:
    """
    Public surface of the fee claimer.

    Mutating operations sign with the wallet given at construction and return
    the final settlement signature. Failures raise a FeeClaimerError whose
    `workflow_result` lists the steps that had already settled.
    """

    def __init__(
        self,
        ledger,
        wallet,
        bonding_curve_sdk,
        cp_amm_sdk,
        token_sdk,
        commitment: str = None,
        max_workers: int = None,
        **poll_options,
    ):
        self.ledger = ledger
        self.wallet = wallet
        self.bonding_curve = bonding_curve_sdk
        self.cp_amm = cp_amm_sdk
        self.commitment = commitment or Config.COMMITMENT

        self.resolver = TokenProgramResolver(ledger)
        self.guard = AuthorizationGuard(bonding_curve_sdk)
        self.locator = PoolLocator(bonding_curve_sdk, cp_amm_sdk, self.resolver, max_workers=max_workers)
        self.metrics_reader = FeeMetricsReader(bonding_curve_sdk)
        self.claims = ClaimWorkflow(
            self.locator, self.guard, self.resolver, bonding_curve_sdk, cp_amm_sdk, ledger, self.commitment
        )
        # poll_options: sleep / clock overrides for the split workflow's bounded polls
        self.splits = SplitTransferWorkflow(
            self.locator, self.resolver, cp_amm_sdk, token_sdk, ledger, self.commitment, **poll_options
        )

    # ---------------- Claims ----------------

    def claim_partner_fee(
        self, pool: str, bounds: Optional[ClaimBounds] = None, skip_validation: bool = False, commitment: str = None
    ) -> str:
        return self.claims.claim_partner_fee(
            pool, self.wallet, bounds=bounds, skip_validation=skip_validation, commitment=commitment
        ).signature

    def claim_creator_fee(
        self,
        pool: str,
        bounds: Optional[ClaimBounds] = None,
        receiver: Optional[str] = None,
        temp_wsol_account: Optional[str] = None,
        commitment: str = None,
    ) -> str:
        return self.claims.claim_creator_fee(
            pool,
            self.wallet,
            bounds=bounds,
            receiver=receiver,
            temp_wsol_account=temp_wsol_account,
            commitment=commitment,
        ).signature

    def claim_position_fee(
        self,
        position: str,
        bounds: Optional[ClaimBounds] = None,
        receiver: Optional[str] = None,
        temp_wsol_account: Optional[str] = None,
        commitment: str = None,
    ) -> str:
        return self.claims.claim_position_fee(
            position,
            self.wallet,
            bounds=bounds,
            receiver=receiver,
            temp_wsol_account=temp_wsol_account,
            commitment=commitment,
        ).signature

    # ---------------- Positions ----------------

    def list_positions(self, owner: str) -> List[Position]:
        return self.locator.list_positions(owner)

    def split_position_to_recipient(self, pool: str, recipient: str, percent, commitment: str = None) -> str:
        return self.splits.split_position_to_recipient(
            pool, recipient, percent, self.wallet, commitment=commitment
        ).signature

    # ---------------- Reads ----------------

    def get_pool_fee_metrics(self, pool: str) -> FeeMetricsSnapshot:
        return self.metrics_reader.get_metrics(pool)

    def get_pool(self, identifier: str) -> Pool:
        return self.locator.get_pool(identifier)

    def get_pool_partner_info(self, pool: str) -> PoolPartnerInfo:
        return self.guard.get_partner_info(pool)

    def get_pool_curve_progress(self, pool: str) -> float:
        return self.metrics_reader.get_curve_progress(pool)

    def derive_damm_v2_pool_address(self, pool: str) -> str:
        """Constant-product pool a graduated bonding-curve pool migrates into."""
        pool_state = self.locator.get_pool(pool)
        if not pool_state.config:
            raise NotFoundError(f'Pool {pool_state.address} has no config reference', address=pool_state.address)
        with collaborator_step('derive_damm_v2_pool_address'):
            pool_config = self.bonding_curve.get_pool_config(pool_state.config)
        if pool_config is None:
            raise NotFoundError(f'Pool config not found: {pool_state.config}', address=pool_state.config)

        damm_config = Config.DAMM_V2_MIGRATION_FEE_ADDRESS.get(pool_config.migration_fee_option)
        if damm_config is None:
            raise ValidationError(
                f'Unknown migration fee option {pool_config.migration_fee_option} for config {pool_config.address}'
            )
        with collaborator_step('derive_damm_v2_pool_address'):
            address = self.bonding_curve.derive_damm_v2_pool_address(damm_config, pool_state.base_mint, pool_state.quote_mint)
        logger.info(f'Pool {pool_state.address} migrates to DAMM v2 pool {address} (config {damm_config})')
        return normalize_address(str(address), 'migrated pool')

    def get_quote_mint_address(self, symbol: str) -> str:
        return get_quote_mint_address(symbol)


def get_quote_mint_address(symbol: str) -> str:
    mint = Config.QUOTE_MINTS.get((symbol or '').upper())
    if mint is None:
        raise ValidationError(f"Unsupported quote mint {symbol!r}; expected one of {', '.join(Config.QUOTE_MINTS)}")
    return mint
