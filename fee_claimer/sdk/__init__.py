from .base import (
    FEE_ACCOUNTING_VERSION,
    BondingCurveSdk,
    CpAmmSdk,
    FeeAccounting,
    TokenProgramSdk,
    supports_fee_accounting,
)
from .transaction import TransactionDraft
from .spl_token import SplTokenSdk
from .loader import load_sdk

__all__ = [
    'FEE_ACCOUNTING_VERSION',
    'BondingCurveSdk',
    'CpAmmSdk',
    'FeeAccounting',
    'TokenProgramSdk',
    'supports_fee_accounting',
    'TransactionDraft',
    'SplTokenSdk',
    'load_sdk',
]
