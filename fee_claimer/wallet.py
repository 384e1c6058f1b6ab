import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import base58
from solders.keypair import Keypair

from .config import Config
from .errors import WalletNotCapableError

logger = logging.getLogger(__name__)


class Wallet(ABC):
    """Signing capability. Never exposes key material to the orchestrator."""

    @property
    @abstractmethod
    def public_key(self) -> Optional[str]:
        """Base58 address of the connected account, None when disconnected."""

    @abstractmethod
    def sign(self, transaction):
        """Sign a stamped transaction and return it."""

    def sign_all(self, transactions: List) -> List:
        return [self.sign(tx) for tx in transactions]


class KeypairWallet(Wallet):
    """Wallet backed by a local keypair (operator scripts)."""

    def __init__(self, keypair: Keypair):
        self._keypair = keypair

    @classmethod
    def from_base58(cls, secret: str) -> 'KeypairWallet':
        try:
            raw = base58.b58decode(secret.strip())
            return cls(Keypair.from_bytes(raw))
        except (ValueError, TypeError) as e:
            raise WalletNotCapableError(f'PRIVATE_KEY is not a valid base58 keypair: {e}') from e

    @classmethod
    def from_env(cls) -> 'KeypairWallet':
        if not Config.PRIVATE_KEY:
            raise WalletNotCapableError('PRIVATE_KEY is not set in the environment.')
        return cls.from_base58(Config.PRIVATE_KEY)

    @property
    def public_key(self) -> str:
        return str(self._keypair.pubkey())

    def sign(self, transaction):
        return transaction.partial_sign([self._keypair])


def require_signer(wallet) -> str:
    """
    Check the wallet can sign and is connected; return its address.
    """
    if wallet is None:
        raise WalletNotCapableError('Wallet not connected')
    if not callable(getattr(wallet, 'sign', None)) or not callable(getattr(wallet, 'sign_all', None)):
        raise WalletNotCapableError(f'Wallet {type(wallet).__name__} does not support transaction signing')
    public_key = getattr(wallet, 'public_key', None)
    if not public_key:
        raise WalletNotCapableError('Wallet not connected')
    return str(public_key)
