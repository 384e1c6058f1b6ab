import logging
import sys

from .config import Config
from .authorization import (
    AUTHORIZED_WALLETS,
    OPERATOR_ROLE,
    get_wallet_role,
    is_wallet_authorized,
    parse_authorization_list,
)


def setup_logging(level: str = None):
    logging.basicConfig(
        level=getattr(logging, (level or Config.LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # urllib3 is chatty at DEBUG about every RPC round trip
    logging.getLogger('urllib3').setLevel(logging.WARNING)


__all__ = [
    'Config',
    'setup_logging',
    'AUTHORIZED_WALLETS',
    'OPERATOR_ROLE',
    'get_wallet_role',
    'is_wallet_authorized',
    'parse_authorization_list',
]
