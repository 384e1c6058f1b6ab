from .core import FeeClaimerService
from .errors import (
    FeeClaimerError,
    NotFoundError,
    AuthorizationError,
    UnsupportedMintProgramError,
    ValidationError,
    IndexingTimeoutError,
    AccountCreationTimeoutError,
    SubmissionError,
    WalletNotCapableError,
)

__all__ = [
    'FeeClaimerService',
    'FeeClaimerError',
    'NotFoundError',
    'AuthorizationError',
    'UnsupportedMintProgramError',
    'ValidationError',
    'IndexingTimeoutError',
    'AccountCreationTimeoutError',
    'SubmissionError',
    'WalletNotCapableError',
]
