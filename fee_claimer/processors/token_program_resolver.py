import logging
from typing import Tuple

from ..addresses import normalize_address
from ..errors import NotFoundError, UnsupportedMintProgramError, collaborator_step
from ..models import EXTENDED, STANDARD, TOKEN_2022_PROGRAM_ID, TOKEN_PROGRAM_ID, TokenProgramBinding

logger = logging.getLogger(__name__)

OWNER_TO_PROGRAM = {
    TOKEN_PROGRAM_ID: STANDARD,
    TOKEN_2022_PROGRAM_ID: EXTENDED,
}


class TokenProgramResolver:
    """
    Classifies which token program owns a mint by reading the mint account's
    owner. Nothing is cached: every call reads the chain.
    """

    def __init__(self, ledger):
        self.ledger = ledger

    def resolve(self, mint: str) -> TokenProgramBinding:
        mint = normalize_address(mint, 'mint')
        with collaborator_step('resolve_token_program'):
            account = self.ledger.get_account_info(mint)
        if account is None:
            raise NotFoundError(f'Mint account {mint} does not exist', address=mint)

        program = OWNER_TO_PROGRAM.get(account.owner)
        if program is None:
            raise UnsupportedMintProgramError(mint, account.owner)

        logger.debug(f'Mint {mint[:8]}... owned by {program} token program')
        return TokenProgramBinding(mint=mint, program=program)

    def resolve_pair(self, mint_a: str, mint_b: str) -> Tuple[TokenProgramBinding, TokenProgramBinding]:
        """Resolve both mints of a pool. Each is read separately; pools may mix programs."""
        return self.resolve(mint_a), self.resolve(mint_b)
