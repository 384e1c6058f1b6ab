import unittest
from unittest.mock import MagicMock

from fee_claimer.errors import LedgerRpcError, NotFoundError, SubmissionError, UnsupportedMintProgramError, ValidationError
from fee_claimer.models import EXTENDED, STANDARD, TOKEN_2022_PROGRAM_ID, TOKEN_PROGRAM_ID
from fee_claimer.processors import TokenProgramResolver
from ledger_fakes import FakeChain, new_address


class TestTokenProgramResolver(unittest.TestCase):

    def setUp(self):
        self.chain = FakeChain()
        self.resolver = TokenProgramResolver(self.chain)

    def test_standard_mint(self):
        mint = self.chain.add_mint(STANDARD)
        binding = self.resolver.resolve(mint)
        self.assertEqual(binding.program, STANDARD)
        self.assertEqual(binding.program_id, TOKEN_PROGRAM_ID)

    def test_extended_mint(self):
        mint = self.chain.add_mint(EXTENDED)
        binding = self.resolver.resolve(mint)
        self.assertEqual(binding.program, EXTENDED)
        self.assertEqual(binding.program_id, TOKEN_2022_PROGRAM_ID)

    def test_other_owner(self):
        mint = self.chain.add_account(new_address(), '11111111111111111111111111111111')
        with self.assertRaises(UnsupportedMintProgramError) as ctx:
            self.resolver.resolve(mint)
        self.assertEqual(ctx.exception.mint, mint)
        self.assertEqual(ctx.exception.owner, '11111111111111111111111111111111')

    def test_missing_mint(self):
        with self.assertRaises(NotFoundError):
            self.resolver.resolve(new_address())

    def test_gateway_failure_names_step(self):
        self.chain.get_account_info = MagicMock(side_effect=LedgerRpcError('HTTP 429'))
        with self.assertRaises(SubmissionError) as ctx:
            self.resolver.resolve(new_address())
        self.assertEqual(ctx.exception.step, 'resolve_token_program')
        self.assertIsInstance(ctx.exception.__cause__, LedgerRpcError)

    def test_invalid_address(self):
        with self.assertRaises(ValidationError):
            self.resolver.resolve('0OIl')
        self.assertEqual(self.chain.account_reads, 0)

    def test_pair_reads_each_mint(self):
        base = self.chain.add_mint(EXTENDED)
        quote = self.chain.add_mint(STANDARD)

        base_binding, quote_binding = self.resolver.resolve_pair(base, quote)

        self.assertEqual((base_binding.program, quote_binding.program), (EXTENDED, STANDARD))
        self.assertEqual(self.chain.account_reads, 2)

    def test_no_caching_between_calls(self):
        mint = self.chain.add_mint(STANDARD)
        self.resolver.resolve(mint)
        self.chain.add_account(mint, TOKEN_2022_PROGRAM_ID)
        self.assertEqual(self.resolver.resolve(mint).program, EXTENDED)


if __name__ == '__main__':
    unittest.main()
