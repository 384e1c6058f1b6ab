import logging

from solders.pubkey import Pubkey
from spl.token.instructions import (
    TransferCheckedParams,
    create_associated_token_account,
    get_associated_token_address,
    transfer_checked,
)

from ..models import TokenProgramBinding
from .base import TokenProgramSdk
from .transaction import TransactionDraft

logger = logging.getLogger(__name__)


class SplTokenSdk(TokenProgramSdk):
    """Token / Token-2022 instruction builders backed by solana-py's spl.token."""

    def build_create_associated_account(
        self, payer: str, account: str, owner: str, binding: TokenProgramBinding
    ) -> TransactionDraft:
        program_id = Pubkey.from_string(binding.program_id)
        owner_pk = Pubkey.from_string(owner)
        mint_pk = Pubkey.from_string(binding.mint)

        expected = get_associated_token_address(owner_pk, mint_pk, program_id)
        if str(expected) != account:
            raise ValueError(f'Associated account mismatch for {owner}/{binding.mint}: expected {expected}, got {account}')

        ix = create_associated_token_account(
            payer=Pubkey.from_string(payer),
            owner=owner_pk,
            mint=mint_pk,
            token_program_id=program_id,
        )
        return TransactionDraft([ix], label='create_associated_account')

    def build_transfer_checked(
        self,
        source: str,
        destination: str,
        authority: str,
        binding: TokenProgramBinding,
        amount: int,
        decimals: int,
    ) -> TransactionDraft:
        ix = transfer_checked(TransferCheckedParams(
            program_id=Pubkey.from_string(binding.program_id),
            source=Pubkey.from_string(source),
            mint=Pubkey.from_string(binding.mint),
            dest=Pubkey.from_string(destination),
            owner=Pubkey.from_string(authority),
            amount=amount,
            decimals=decimals,
            signers=[],
        ))
        return TransactionDraft([ix], label='transfer_checked')
