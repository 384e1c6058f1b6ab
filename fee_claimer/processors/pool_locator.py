import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

from ..addresses import normalize_address
from ..config import Config
from ..errors import FeeClaimerError, NotFoundError, SubmissionError, collaborator_step
from ..models import (
    FEE_COMPUTED,
    FEE_FROM_POSITION_RECORD,
    FEE_UNAVAILABLE,
    Pool,
    Position,
    PositionHandle,
    TokenProgramBinding,
)
from ..sdk import supports_fee_accounting

logger = logging.getLogger(__name__)


class PoolLocator:
    """
    Resolves pools and the positions an owner holds, enriched with parent pool
    info, token program bindings and unclaimed fees. Every call re-reads state.
    """

    def __init__(self, bonding_curve_sdk, cp_amm_sdk, token_program_resolver, max_workers: int = None):
        self.bonding_curve = bonding_curve_sdk
        self.cp_amm = cp_amm_sdk
        self.resolver = token_program_resolver
        self.max_workers = max_workers or Config.RPC_MAX_WORKERS

    # ---------------- Pools ----------------

    def get_pool(self, identifier: str) -> Pool:
        """Bonding curve pool by pool address, falling back to lookup by base mint."""
        address = normalize_address(identifier, 'pool')
        with collaborator_step('get_pool'):
            pool = self.bonding_curve.get_pool(address)
            if pool is None:
                logger.debug(f'No pool at {address}, trying as base mint')
                pool = self.bonding_curve.get_pool_by_base_mint(address)
        if pool is None:
            raise NotFoundError(f'Pool not found for address or base mint: {address}', address=address)
        return pool

    def get_pool_by_base_mint(self, base_mint: str) -> Pool:
        base_mint = normalize_address(base_mint, 'base mint')
        with collaborator_step('get_pool_by_base_mint'):
            pool = self.bonding_curve.get_pool_by_base_mint(base_mint)
        if pool is None:
            raise NotFoundError(f'Pool not found for base mint: {base_mint}', address=base_mint)
        return pool

    def get_cp_pool(self, address: str) -> Pool:
        address = normalize_address(address, 'pool')
        with collaborator_step('get_cp_pool'):
            pool = self.cp_amm.fetch_pool_state(address)
        if pool is None:
            raise NotFoundError(f'Pool state not found: {address}', address=address)
        return pool

    # ---------------- Positions ----------------

    def list_positions(self, owner: str) -> List[Position]:
        owner = normalize_address(owner, 'owner')
        logger.info(f'Fetching positions for user: {owner}')
        with collaborator_step('list_positions'):
            handles = self.cp_amm.get_positions_by_user(owner) or []
        logger.info(f'Found {len(handles)} positions')
        if not handles:
            return []

        workers = max(1, min(self.max_workers, len(handles)))
        with ThreadPoolExecutor(max_workers=workers) as ex:
            return list(ex.map(lambda h: self._enrich_fresh(h, owner), handles))

    def list_positions_in_pool(self, pool_address: str, owner: str) -> List[Position]:
        pool_address = normalize_address(pool_address, 'pool')
        owner = normalize_address(owner, 'owner')
        with collaborator_step('list_positions_in_pool'):
            handles = self.cp_amm.get_user_positions_by_pool(pool_address, owner) or []
        if not handles:
            return []

        pool = self.get_cp_pool(pool_address)
        base_binding, quote_binding = self.resolver.resolve_pair(pool.base_mint, pool.quote_mint)
        return [self._build_position(h, owner, pool, base_binding, quote_binding) for h in handles]

    def get_position(self, position_address: str, owner: str) -> Position:
        position_address = normalize_address(position_address, 'position')
        with collaborator_step('get_position'):
            state = self.cp_amm.fetch_position_state(position_address)
        if state is None:
            raise NotFoundError(f'Position not found: {position_address}', address=position_address)
        for position in self.list_positions_in_pool(state.pool, owner):
            if position.address == position_address:
                return position
        raise NotFoundError(f'Position {position_address} is not held by {owner}', address=position_address)

    def _enrich_fresh(self, handle: PositionHandle, owner: str) -> Position:
        try:
            pool = self.get_cp_pool(handle.state.pool)
            base_binding, quote_binding = self.resolver.resolve_pair(pool.base_mint, pool.quote_mint)
            return self._build_position(handle, owner, pool, base_binding, quote_binding)
        except SubmissionError as e:
            # Keep the position address in the message; the original cause stays chained
            raise SubmissionError(
                f'Error enriching position {handle.position}: {e.message}', step=e.step
            ) from (e.__cause__ or e)
        except FeeClaimerError:
            raise
        except Exception as e:
            raise SubmissionError(f'Error enriching position {handle.position}: {e}', step='enrich_position') from e

    def _build_position(
        self,
        handle: PositionHandle,
        owner: str,
        pool: Pool,
        base_binding: TokenProgramBinding,
        quote_binding: TokenProgramBinding,
    ) -> Position:
        fee_base, fee_quote, source = self.compute_unclaimed_fees(pool, handle)
        return Position(
            address=handle.position,
            nft_account=handle.position_nft_account,
            owner=owner,
            pool=pool.address,
            liquidity=int(handle.state.liquidity),
            nft_mint=handle.state.nft_mint,
            unclaimed_base=fee_base,
            unclaimed_quote=fee_quote,
            fee_source=source,
            fee_degraded=source == FEE_UNAVAILABLE,
            pool_info=pool,
            base_binding=base_binding,
            quote_binding=quote_binding,
        )

    def compute_unclaimed_fees(self, pool: Pool, handle: PositionHandle) -> Tuple[int, int, str]:
        """
        Unclaimed (base, quote) fees of a position plus where the figure came from.

        Prefers the SDK's fee accounting capability, then the fee fields stored
        on the position record. When neither exists the result is zero and
        flagged unavailable.
        """
        state = handle.state
        if supports_fee_accounting(self.cp_amm):
            with collaborator_step('compute_unclaimed_fees'):
                fees = self.cp_amm.compute_unclaimed_fees(pool, state)
            return int(fees.fee_token_a), int(fees.fee_token_b), FEE_COMPUTED

        if state.unclaimed_fee_a is not None and state.unclaimed_fee_b is not None:
            logger.info(f'Fee accounting unavailable; using stored fee fields of position {handle.position}')
            return int(state.unclaimed_fee_a), int(state.unclaimed_fee_b), FEE_FROM_POSITION_RECORD

        logger.warning(
            f'Could not compute unclaimed fees for position {handle.position}: '
            f'SDK has no fee accounting and the position record has no fee fields. Reporting zero.'
        )
        return 0, 0, FEE_UNAVAILABLE
