from .rpc_client import AccountInfo, SolanaRpcClient, COMMITMENT_LEVELS, commitment_reached
from ..errors import LedgerRpcError


def get_ledger_client(rpc_url: str = None) -> SolanaRpcClient:
    return SolanaRpcClient(rpc_url)


__all__ = [
    'AccountInfo',
    'SolanaRpcClient',
    'COMMITMENT_LEVELS',
    'commitment_reached',
    'LedgerRpcError',
    'get_ledger_client',
]
