import logging
from typing import Any

import base58
from solders.pubkey import Pubkey

from .errors import ValidationError
from .models import ASSOCIATED_TOKEN_PROGRAM_ID, PROGRAM_IDS

logger = logging.getLogger(__name__)

PUBKEY_LENGTH = 32


def normalize_address(value: Any, field: str = 'address') -> str:
    """
    Return the canonical base58 encoding of an address.

    Accepts str, bytes or objects whose str() is base58 (solders Pubkey).
    Raises ValidationError for anything that does not decode to 32 bytes.
    """
    if value is None:
        raise ValidationError(f'{field} is required')
    s = value.decode('utf-8', errors='ignore') if isinstance(value, (bytes, bytearray)) else str(value)
    s = s.replace('\x00', '').strip()
    if not s:
        raise ValidationError(f'{field} is required')
    try:
        raw = base58.b58decode(s)
    except ValueError as e:
        raise ValidationError(f'Invalid {field} {s!r}: not base58') from e
    if len(raw) != PUBKEY_LENGTH:
        raise ValidationError(f'Invalid {field} {s!r}: decodes to {len(raw)} bytes, expected {PUBKEY_LENGTH}')
    return base58.b58encode(raw).decode('utf-8')


def to_pubkey(value: Any, field: str = 'address') -> Pubkey:
    return Pubkey.from_string(normalize_address(value, field))


def derive_associated_token_address(owner: str, mint: str, program: str) -> str:
    """
    Derive the associated token account of (owner, mint) under the given
    token program variant. Pure: no chain read.
    """
    try:
        program_id = PROGRAM_IDS[program]
    except KeyError:
        raise ValidationError(f'Unknown token program variant: {program}')
    seeds = [bytes(to_pubkey(owner, 'owner')), bytes(Pubkey.from_string(program_id)), bytes(to_pubkey(mint, 'mint'))]
    ata, _bump = Pubkey.find_program_address(seeds, Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ID))
    return str(ata)
