from contextlib import contextmanager
from typing import Optional


class FeeClaimerError(Exception):
    """Base class for failures surfaced to callers. `step` names the workflow step that failed."""

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.step = step

    def __str__(self):
        if self.step:
            return f'[{self.step}] {self.message}'
        return self.message


class NotFoundError(FeeClaimerError):
    """Raised when a pool, position or account is absent."""

    def __init__(self, message: str, address: Optional[str] = None, step: Optional[str] = None):
        super().__init__(message, step=step)
        self.address = address


class AuthorizationError(FeeClaimerError):
    """Raised when the caller is not the declared fee claimer of a pool."""

    def __init__(self, message: str, expected: Optional[str], actual: str, step: Optional[str] = None):
        super().__init__(message, step=step)
        self.expected = expected
        self.actual = actual


class UnsupportedMintProgramError(FeeClaimerError):
    """Raised when a mint is owned by neither the Token nor the Token-2022 program."""

    def __init__(self, mint: str, owner: Optional[str], step: Optional[str] = None):
        super().__init__(f'Mint {mint} is owned by unsupported program {owner}', step=step)
        self.mint = mint
        self.owner = owner


class ValidationError(FeeClaimerError):
    pass


class IndexingTimeoutError(FeeClaimerError):
    pass


class AccountCreationTimeoutError(FeeClaimerError):
    pass


class SubmissionError(FeeClaimerError):
    """Raised when signing is refused or the gateway fails to settle a transaction."""
    pass


class WalletNotCapableError(FeeClaimerError):
    """Raised when a wallet is not connected or cannot sign."""
    pass


class LedgerRpcError(Exception):
    """Raised by the ledger gateway for transport and JSON-RPC level failures."""
    pass


@contextmanager
def collaborator_step(name: str):
    """
    Re-raise failures of an SDK or gateway call as SubmissionError naming the
    step, cause chained. FeeClaimerErrors pass through untouched.
    """
    try:
        yield
    except FeeClaimerError:
        raise
    except Exception as e:
        raise SubmissionError(f'{name} failed: {e}', step=name) from e
