from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import Config

STANDARD = 'standard'
EXTENDED = 'extended'

TOKEN_PROGRAM_ID = 'TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA'
TOKEN_2022_PROGRAM_ID = 'TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb'
ASSOCIATED_TOKEN_PROGRAM_ID = 'ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL'

PROGRAM_IDS = {
    STANDARD: TOKEN_PROGRAM_ID,
    EXTENDED: TOKEN_2022_PROGRAM_ID,
}

BONDING_CURVE = 'bonding_curve'
CONSTANT_PRODUCT = 'constant_product'

# Fee figure provenance for an enriched position
FEE_COMPUTED = 'computed'
FEE_FROM_POSITION_RECORD = 'position_record'
FEE_UNAVAILABLE = 'unavailable'


@dataclass(frozen=True)
class TokenProgramBinding:
    mint: str
    program: str

    @property
    def program_id(self) -> str:
        return PROGRAM_IDS[self.program]


@dataclass(frozen=True)
class Pool:
    address: str
    base_mint: str
    quote_mint: str
    kind: str = BONDING_CURVE
    config: Optional[str] = None
    fee_claimer: Optional[str] = None
    creator: Optional[str] = None
    base_vault: Optional[str] = None
    quote_vault: Optional[str] = None
    curve_progress: Optional[float] = None


@dataclass(frozen=True)
class PoolConfig:
    address: str
    fee_claimer: Optional[str] = None
    migration_fee_option: Optional[int] = None


@dataclass(frozen=True)
class PoolPartnerInfo:
    partner_address: Optional[str]
    config_address: Optional[str]


@dataclass(frozen=True)
class PositionState:
    address: str
    pool: str
    nft_mint: str
    liquidity: int = 0
    owner: Optional[str] = None
    unclaimed_fee_a: Optional[int] = None
    unclaimed_fee_b: Optional[int] = None


@dataclass(frozen=True)
class PositionHandle:
    """Listing entry as returned by the CP-AMM SDK."""
    position: str
    position_nft_account: str
    state: PositionState


@dataclass(frozen=True)
class UnclaimedFees:
    fee_token_a: int = 0
    fee_token_b: int = 0


@dataclass(frozen=True)
class Position:
    address: str
    nft_account: str
    owner: str
    pool: str
    liquidity: int
    nft_mint: Optional[str] = None
    unclaimed_base: int = 0
    unclaimed_quote: int = 0
    fee_source: str = FEE_COMPUTED
    fee_degraded: bool = False
    pool_info: Optional[Pool] = None
    base_binding: Optional[TokenProgramBinding] = None
    quote_binding: Optional[TokenProgramBinding] = None

    def to_row(self) -> Dict[str, Any]:
        return {
            'position': self.address,
            'pool': self.pool,
            'liquidity': str(self.liquidity),
            'unclaimed_base': str(self.unclaimed_base),
            'unclaimed_quote': str(self.unclaimed_quote),
            'base_program': self.base_binding.program if self.base_binding else None,
            'quote_program': self.quote_binding.program if self.quote_binding else None,
            'fee_source': self.fee_source,
        }


@dataclass(frozen=True)
class FeeMetricsSnapshot:
    partner_base_fee: int
    partner_quote_fee: int
    creator_base_fee: int
    creator_quote_fee: int
    total_trading_base_fee: int
    total_trading_quote_fee: int

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {
            'current': {
                'partnerBaseFee': str(self.partner_base_fee),
                'partnerQuoteFee': str(self.partner_quote_fee),
                'creatorBaseFee': str(self.creator_base_fee),
                'creatorQuoteFee': str(self.creator_quote_fee),
            },
            'total': {
                'totalTradingBaseFee': str(self.total_trading_base_fee),
                'totalTradingQuoteFee': str(self.total_trading_quote_fee),
            },
        }


@dataclass(frozen=True)
class ClaimBounds:
    max_base_amount: int = Config.DEFAULT_MAX_BASE_AMOUNT
    max_quote_amount: int = Config.DEFAULT_MAX_QUOTE_AMOUNT


@dataclass(frozen=True)
class StepRecord:
    name: str
    signature: str


@dataclass
class WorkflowResult:
    workflow: str
    steps: List[StepRecord] = field(default_factory=list)
    signature: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.signature is not None and self.error is None

    def record(self, name: str, signature: str):
        self.steps.append(StepRecord(name=name, signature=signature))


def format_token_amount(amount: int, decimals: int = 9, max_fraction_digits: int = 6) -> str:
    """Render a minor-unit integer as a decimal string, truncating the fraction."""
    divisor = 10 ** decimals
    whole, fraction = divmod(int(amount), divisor)
    if decimals == 0:
        return str(whole)
    fraction_str = str(fraction).rjust(decimals, '0')[:max_fraction_digits]
    return f'{whole}.{fraction_str}'
