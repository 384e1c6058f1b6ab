"""
Process-wide authorization list.

Loaded once from Config.AUTHORIZED_WALLETS at import time and exposed as a
read-only mapping of wallet address -> role.
"""

import logging
from types import MappingProxyType
from typing import Mapping, Optional

from .config import Config

logger = logging.getLogger(__name__)

OPERATOR_ROLE = 'operator'


def parse_authorization_list(raw: Optional[str]) -> Mapping[str, str]:
    """
    Parse "address[:role]" entries separated by commas or newlines.
    Entries without a role get the operator role.
    """
    entries = {}
    for chunk in (raw or '').replace('\n', ',').split(','):
        item = chunk.strip()
        if not item:
            continue
        address, _, role = item.partition(':')
        address = address.strip()
        role = role.strip() or OPERATOR_ROLE
        if address in entries and entries[address] != role:
            logger.warning(f'Duplicate authorization entry for {address}: keeping role {entries[address]}')
            continue
        entries[address] = role
    return MappingProxyType(entries)


AUTHORIZED_WALLETS: Mapping[str, str] = parse_authorization_list(Config.AUTHORIZED_WALLETS)


def get_wallet_role(wallet_address: Optional[str]) -> Optional[str]:
    if not wallet_address:
        return None
    return AUTHORIZED_WALLETS.get(wallet_address)


def is_wallet_authorized(wallet_address: Optional[str], role: str = OPERATOR_ROLE) -> bool:
    return get_wallet_role(wallet_address) == role
