import base64
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from ..config import Config
from ..errors import LedgerRpcError

logger = logging.getLogger(__name__)

COMMITMENT_LEVELS = ('processed', 'confirmed', 'finalized')


@dataclass(frozen=True)
class AccountInfo:
    address: str
    owner: str
    lamports: int
    data: bytes = b''
    executable: bool = False


def commitment_reached(status: Optional[str], wanted: str) -> bool:
    if status not in COMMITMENT_LEVELS:
        return False
    return COMMITMENT_LEVELS.index(status) >= COMMITMENT_LEVELS.index(wanted)


class SolanaRpcClient:
    """
    Ledger gateway over Solana JSON-RPC.

    Reads account state, hands out recent blockhashes and submits signed
    transactions, polling signature status until the requested commitment.
    """

    def __init__(self, rpc_url: str = None, timeout: float = None):
        self.rpc_url = rpc_url or Config.SOLANA_HTTP_RPC_URL
        if not self.rpc_url:
            raise ValueError('SOLANA_HTTP_RPC_URL is not set in the environment.')
        self.timeout = timeout or Config.RPC_TIMEOUT_SECONDS
        self._session = requests.Session()
        self._lock = threading.Lock()
        self._request_id = 0

    def _next_id(self) -> int:
        with self._lock:
            self._request_id += 1
            return self._request_id

    def _call(self, method: str, params: List[Any]) -> Any:
        payload = {
            'jsonrpc': '2.0',
            'id': self._next_id(),
            'method': method,
            'params': params,
        }
        try:
            resp = self._session.post(
                self.rpc_url,
                json=payload,
                timeout=self.timeout,
                headers={'Content-Type': 'application/json'},
            )
            resp.raise_for_status()
            body = resp.json()
        except Exception as e:
            raise LedgerRpcError(f'{method} request failed: {e}') from e

        if 'error' in body:
            error = body['error'] or {}
            raise LedgerRpcError(f"{method} returned error {error.get('code')}: {error.get('message')}")
        return body.get('result')

    def get_account_info(self, address: str, commitment: str = None) -> Optional[AccountInfo]:
        """Return the account at `address`, or None when it does not exist."""
        result = self._call('getAccountInfo', [address, {
            'encoding': 'base64',
            'commitment': commitment or Config.COMMITMENT,
        }])
        value = (result or {}).get('value')
        if value is None:
            return None
        return self._parse_account(address, value)

    def _parse_account(self, address: str, value: Dict[str, Any]) -> AccountInfo:
        data = value.get('data')
        raw = b''
        if isinstance(data, list) and data:
            raw = base64.b64decode(data[0])
        return AccountInfo(
            address=address,
            owner=value.get('owner'),
            lamports=int(value.get('lamports') or 0),
            data=raw,
            executable=bool(value.get('executable', False)),
        )

    def get_latest_blockhash(self, commitment: str = None) -> str:
        result = self._call('getLatestBlockhash', [{'commitment': commitment or Config.COMMITMENT}])
        try:
            return result['value']['blockhash']
        except (TypeError, KeyError) as e:
            raise LedgerRpcError(f'getLatestBlockhash returned unexpected payload: {result}') from e

    def send_transaction(self, raw_transaction: bytes, commitment: str = None) -> str:
        encoded = base64.b64encode(raw_transaction).decode('ascii')
        signature = self._call('sendTransaction', [encoded, {
            'encoding': 'base64',
            'preflightCommitment': commitment or Config.COMMITMENT,
        }])
        if not signature:
            raise LedgerRpcError('sendTransaction returned no signature')
        return signature

    def get_signature_status(self, signature: str) -> Optional[Dict[str, Any]]:
        result = self._call('getSignatureStatuses', [[signature], {'searchTransactionHistory': False}])
        statuses = (result or {}).get('value') or [None]
        return statuses[0]

    def confirm_transaction(self, signature: str, commitment: str = None, timeout: float = None) -> str:
        """Poll until `signature` reaches `commitment`; raise LedgerRpcError on error or timeout."""
        wanted = commitment or Config.COMMITMENT
        deadline = time.monotonic() + (timeout or Config.CONFIRM_TIMEOUT_SECONDS)
        while True:
            status = self.get_signature_status(signature)
            if status:
                if status.get('err'):
                    raise LedgerRpcError(f"Transaction {signature} failed: {status['err']}")
                if commitment_reached(status.get('confirmationStatus'), wanted):
                    return signature
            if time.monotonic() >= deadline:
                raise LedgerRpcError(f'Transaction {signature} not {wanted} within {timeout or Config.CONFIRM_TIMEOUT_SECONDS}s')
            time.sleep(Config.CONFIRM_POLL_INTERVAL_SECONDS)

    def send_and_confirm(self, raw_transaction: bytes, commitment: str = None) -> str:
        wanted = commitment or Config.COMMITMENT
        if wanted not in COMMITMENT_LEVELS:
            raise LedgerRpcError(f'Unsupported commitment level: {wanted}')
        signature = self.send_transaction(raw_transaction, wanted)
        logger.debug(f'Submitted {signature}, awaiting {wanted}')
        return self.confirm_transaction(signature, wanted)
