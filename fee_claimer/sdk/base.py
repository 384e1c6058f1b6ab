"""Capability interfaces the orchestrator needs from the protocol SDKs."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import (
    ClaimBounds,
    FeeMetricsSnapshot,
    Pool,
    PoolConfig,
    PositionHandle,
    PositionState,
    TokenProgramBinding,
    UnclaimedFees,
)
from .transaction import TransactionDraft

FEE_ACCOUNTING_VERSION = 1


class BondingCurveSdk(ABC):
    """Dynamic bonding curve pools: state reads and fee claim builders."""

    @abstractmethod
    def get_pool(self, pool: str) -> Optional[Pool]:
        """Return the pool at `pool`, or None."""

    @abstractmethod
    def get_pool_by_base_mint(self, base_mint: str) -> Optional[Pool]:
        """Return the pool whose base mint is `base_mint`, or None."""

    @abstractmethod
    def get_pool_config(self, config: str) -> Optional[PoolConfig]:
        pass

    @abstractmethod
    def get_pool_fee_metrics(self, pool: str) -> Optional[FeeMetricsSnapshot]:
        pass

    @abstractmethod
    def get_pool_curve_progress(self, pool: str) -> float:
        pass

    @abstractmethod
    def build_claim_partner_fee(
        self,
        pool: Pool,
        fee_claimer: str,
        payer: str,
        base_binding: TokenProgramBinding,
        quote_binding: TokenProgramBinding,
        bounds: ClaimBounds,
    ) -> TransactionDraft:
        pass

    @abstractmethod
    def build_claim_creator_fee(
        self,
        pool: Pool,
        creator: str,
        payer: str,
        base_binding: TokenProgramBinding,
        quote_binding: TokenProgramBinding,
        bounds: ClaimBounds,
        receiver: Optional[str] = None,
        temp_wsol_account: Optional[str] = None,
    ) -> TransactionDraft:
        pass

    @abstractmethod
    def derive_damm_v2_pool_address(self, damm_config: str, token_a_mint: str, token_b_mint: str) -> str:
        """Address of the constant-product pool a graduated bonding-curve pool migrates into."""


class CpAmmSdk(ABC):
    """Constant-product (DAMM v2) pools: positions, splits and position fee claims."""

    # Denominator of the split numerator; see build_split_position
    split_position_denominator: int = 1_000_000_000

    @abstractmethod
    def fetch_pool_state(self, pool: str) -> Optional[Pool]:
        pass

    @abstractmethod
    def fetch_position_state(self, position: str) -> Optional[PositionState]:
        pass

    @abstractmethod
    def get_positions_by_user(self, owner: str) -> List[PositionHandle]:
        pass

    @abstractmethod
    def get_user_positions_by_pool(self, pool: str, owner: str) -> List[PositionHandle]:
        pass

    @abstractmethod
    def build_create_position(self, owner: str, payer: str, pool: str, position_nft_mint: str) -> TransactionDraft:
        """The resulting transaction also needs the position NFT mint keypair's signature."""

    @abstractmethod
    def build_split_position(
        self,
        pool: str,
        first_position_owner: str,
        second_position_owner: str,
        first_position: str,
        first_position_nft_account: str,
        second_position: str,
        second_position_nft_account: str,
        numerator: int,
    ) -> TransactionDraft:
        pass

    @abstractmethod
    def build_claim_position_fee(
        self,
        owner: str,
        pool: Pool,
        position: str,
        position_nft_account: str,
        base_binding: TokenProgramBinding,
        quote_binding: TokenProgramBinding,
        bounds: ClaimBounds,
        receiver: Optional[str] = None,
        temp_wsol_account: Optional[str] = None,
    ) -> TransactionDraft:
        pass


class FeeAccounting(ABC):
    """
    Optional capability of a CP-AMM SDK: unclaimed LP fee computation.

    SDKs opt in by subclassing and declaring the contract version they
    implement.
    """

    fee_accounting_version: int = FEE_ACCOUNTING_VERSION

    @abstractmethod
    def compute_unclaimed_fees(self, pool: Pool, position: PositionState) -> UnclaimedFees:
        pass


def supports_fee_accounting(sdk) -> bool:
    return isinstance(sdk, FeeAccounting) and getattr(sdk, 'fee_accounting_version', None) == FEE_ACCOUNTING_VERSION


class TokenProgramSdk(ABC):
    """Associated token account creation and checked transfers for either token program."""

    @abstractmethod
    def build_create_associated_account(
        self, payer: str, account: str, owner: str, binding: TokenProgramBinding
    ) -> TransactionDraft:
        pass

    @abstractmethod
    def build_transfer_checked(
        self,
        source: str,
        destination: str,
        authority: str,
        binding: TokenProgramBinding,
        amount: int,
        decimals: int,
    ) -> TransactionDraft:
        pass
