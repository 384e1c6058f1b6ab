import logging
from typing import Optional

from ..addresses import normalize_address
from ..errors import ValidationError
from ..models import ClaimBounds, WorkflowResult
from ..wallet import require_signer
from .steps import TransactionRunner, tracked_workflow, validate_commitment, workflow_step

logger = logging.getLogger(__name__)

PARTNER_FEE = 'claim_partner_fee'
CREATOR_FEE = 'claim_creator_fee'
POSITION_FEE = 'claim_position_fee'


def validate_bounds(bounds: Optional[ClaimBounds]) -> ClaimBounds:
    bounds = bounds or ClaimBounds()
    for name in ('max_base_amount', 'max_quote_amount'):
        value = getattr(bounds, name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f'{name} must be an integer amount in minor units, got {value!r}')
        if value < 0:
            raise ValidationError(f'{name} must be non-negative, got {value}')
    return bounds


class ClaimWorkflow:
    """
    Partner, creator and position fee claims.

    resolve -> (authorize) -> resolve token programs -> build -> stamp -> sign
    -> submit. Nothing is submitted before authorization passes.
    """

    def __init__(self, locator, guard, resolver, bonding_curve_sdk, cp_amm_sdk, ledger, commitment: str = None):
        self.locator = locator
        self.guard = guard
        self.resolver = resolver
        self.bonding_curve = bonding_curve_sdk
        self.cp_amm = cp_amm_sdk
        self.runner = TransactionRunner(ledger, commitment)

    def claim_partner_fee(
        self,
        pool: str,
        wallet,
        bounds: Optional[ClaimBounds] = None,
        skip_validation: bool = False,
        commitment: str = None,
    ) -> WorkflowResult:
        caller = require_signer(wallet)
        bounds = validate_bounds(bounds)
        commitment = validate_commitment(commitment, self.runner.commitment)
        result = WorkflowResult(workflow=PARTNER_FEE)

        with tracked_workflow(result):
            logger.info('Claiming partner fee...')
            with workflow_step('resolve'):
                pool_state = self.locator.get_pool(pool)
            logger.info(f'  Pool: {pool_state.address}')
            logger.info(f'  Fee claimer: {caller}')

            with workflow_step('authorize'):
                self.guard.require_partner(pool_state.address, caller, skip_validation=skip_validation)

            with workflow_step('resolve_token_programs'):
                base_binding, quote_binding = self.resolver.resolve_pair(pool_state.base_mint, pool_state.quote_mint)

            logger.info(f'  Max base amount: {bounds.max_base_amount}')
            logger.info(f'  Max quote amount: {bounds.max_quote_amount}')
            with workflow_step('build'):
                draft = self.bonding_curve.build_claim_partner_fee(
                    pool=pool_state,
                    fee_claimer=caller,
                    payer=caller,
                    base_binding=base_binding,
                    quote_binding=quote_binding,
                    bounds=bounds,
                )

            signature = self.runner.submit(draft, wallet, caller, step='claim', commitment=commitment)
            result.record('claim', signature)
            result.signature = signature
            logger.info('Claim partner fee successfully!')
        return result

    def claim_creator_fee(
        self,
        pool: str,
        wallet,
        bounds: Optional[ClaimBounds] = None,
        receiver: Optional[str] = None,
        temp_wsol_account: Optional[str] = None,
        commitment: str = None,
    ) -> WorkflowResult:
        """
        No guard here: the claim instruction itself enforces that the signer
        is the pool creator.
        """
        caller = require_signer(wallet)
        bounds = validate_bounds(bounds)
        commitment = validate_commitment(commitment, self.runner.commitment)
        receiver = normalize_address(receiver, 'receiver') if receiver else None
        temp_wsol_account = normalize_address(temp_wsol_account, 'temp wSOL account') if temp_wsol_account else None
        result = WorkflowResult(workflow=CREATOR_FEE)

        with tracked_workflow(result):
            logger.info('Claiming creator trading fee...')
            with workflow_step('resolve'):
                pool_state = self.locator.get_pool(pool)
            logger.info(f'  Pool: {pool_state.address}')
            logger.info(f'  Creator: {caller}')
            if pool_state.creator and pool_state.creator != caller:
                logger.warning(f'  Pool declares creator {pool_state.creator}; the claim will be rejected on-chain')

            with workflow_step('resolve_token_programs'):
                base_binding, quote_binding = self.resolver.resolve_pair(pool_state.base_mint, pool_state.quote_mint)

            with workflow_step('build'):
                draft = self.bonding_curve.build_claim_creator_fee(
                    pool=pool_state,
                    creator=caller,
                    payer=caller,
                    base_binding=base_binding,
                    quote_binding=quote_binding,
                    bounds=bounds,
                    receiver=receiver,
                    temp_wsol_account=temp_wsol_account,
                )

            signature = self.runner.submit(draft, wallet, caller, step='claim', commitment=commitment)
            result.record('claim', signature)
            result.signature = signature
            logger.info('Claim creator fee successfully!')
        return result

    def claim_position_fee(
        self,
        position: str,
        wallet,
        bounds: Optional[ClaimBounds] = None,
        receiver: Optional[str] = None,
        temp_wsol_account: Optional[str] = None,
        commitment: str = None,
    ) -> WorkflowResult:
        caller = require_signer(wallet)
        bounds = validate_bounds(bounds)
        commitment = validate_commitment(commitment, self.runner.commitment)
        receiver = normalize_address(receiver, 'receiver') if receiver else None
        temp_wsol_account = normalize_address(temp_wsol_account, 'temp wSOL account') if temp_wsol_account else None
        result = WorkflowResult(workflow=POSITION_FEE)

        with tracked_workflow(result):
            logger.info('Claiming position fee (DAMM v2)...')
            with workflow_step('resolve'):
                held = self.locator.get_position(position, caller)
                # Vaults and mints come from a fresh pool read, not the listing
                pool_state = self.locator.get_cp_pool(held.pool)
            logger.info(f'  Pool: {pool_state.address}')
            logger.info(f'  Position: {held.address}')
            logger.info(f'  Owner: {caller}')

            with workflow_step('resolve_token_programs'):
                base_binding, quote_binding = self.resolver.resolve_pair(pool_state.base_mint, pool_state.quote_mint)
            logger.info(f'  Token A program: {base_binding.program_id}')
            logger.info(f'  Token B program: {quote_binding.program_id}')

            with workflow_step('build'):
                draft = self.cp_amm.build_claim_position_fee(
                    owner=caller,
                    pool=pool_state,
                    position=held.address,
                    position_nft_account=held.nft_account,
                    base_binding=base_binding,
                    quote_binding=quote_binding,
                    bounds=bounds,
                    receiver=receiver,
                    temp_wsol_account=temp_wsol_account,
                )

            signature = self.runner.submit(draft, wallet, caller, step='claim', commitment=commitment)
            result.record('claim', signature)
            result.signature = signature
            logger.info('✅ Claim position fee successfully!')
        return result
