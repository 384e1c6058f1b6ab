import logging

from ..addresses import normalize_address
from ..errors import FeeClaimerError, NotFoundError
from ..models import FeeMetricsSnapshot

logger = logging.getLogger(__name__)


class FeeMetricsReader:
    """Reads fee counters of a bonding curve pool. No caching: counters move with every trade."""

    def __init__(self, bonding_curve_sdk):
        self.sdk = bonding_curve_sdk

    def get_metrics(self, pool_address: str) -> FeeMetricsSnapshot:
        pool_address = normalize_address(pool_address, 'pool')
        try:
            metrics = self.sdk.get_pool_fee_metrics(pool_address)
        except FeeClaimerError:
            raise
        except Exception as e:
            raise NotFoundError(f'Failed to get fee metrics for pool: {pool_address}', address=pool_address, step='get_metrics') from e
        if metrics is None:
            raise NotFoundError(f'Failed to get fee metrics for pool: {pool_address}', address=pool_address)

        logger.info(
            f'Pool {pool_address[:8]}... unclaimed partner fees: base={metrics.partner_base_fee} quote={metrics.partner_quote_fee}, '
            f'creator fees: base={metrics.creator_base_fee} quote={metrics.creator_quote_fee}'
        )
        return metrics

    def get_curve_progress(self, pool_address: str) -> float:
        """Bonding curve completion between 0.0 and 1.0."""
        pool_address = normalize_address(pool_address, 'pool')
        try:
            progress = self.sdk.get_pool_curve_progress(pool_address)
        except FeeClaimerError:
            raise
        except Exception as e:
            raise NotFoundError(f'Failed to get pool progress for pool: {pool_address}', address=pool_address, step='get_curve_progress') from e
        if progress is None:
            raise NotFoundError(f'Failed to get pool progress for pool: {pool_address}', address=pool_address)
        return float(progress)
