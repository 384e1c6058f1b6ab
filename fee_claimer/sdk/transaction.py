from typing import List, Optional, Sequence

from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction


class TransactionDraft:
    """
    Unsigned transaction as handed out by a protocol SDK.

    The orchestrator stamps it with a recent blockhash and fee payer, then
    signers add their signatures in order before it is serialized.
    """

    def __init__(self, instructions: Sequence[Instruction], label: str = ''):
        self.instructions: List[Instruction] = list(instructions)
        self.label = label
        self.recent_blockhash: Optional[Hash] = None
        self.fee_payer: Optional[Pubkey] = None
        self._transaction: Optional[Transaction] = None

    @property
    def is_stamped(self) -> bool:
        return self._transaction is not None

    def stamp(self, recent_blockhash: str, fee_payer: str) -> 'TransactionDraft':
        self.recent_blockhash = Hash.from_string(recent_blockhash)
        self.fee_payer = Pubkey.from_string(fee_payer)
        message = Message.new_with_blockhash(self.instructions, self.fee_payer, self.recent_blockhash)
        self._transaction = Transaction.new_unsigned(message)
        return self

    def partial_sign(self, signers: Sequence[Keypair]) -> 'TransactionDraft':
        if not self.is_stamped:
            raise ValueError(f'Transaction {self.label!r} must be stamped before signing')
        self._transaction.partial_sign(list(signers), self.recent_blockhash)
        return self

    def serialize(self) -> bytes:
        if not self.is_stamped:
            raise ValueError(f'Transaction {self.label!r} must be stamped before serializing')
        return bytes(self._transaction)

    def __repr__(self):
        return f'TransactionDraft(label={self.label!r}, instructions={len(self.instructions)}, stamped={self.is_stamped})'
