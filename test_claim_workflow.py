import unittest

from fee_claimer.core import FeeClaimerService
from fee_claimer.errors import AuthorizationError, NotFoundError, SubmissionError, ValidationError, WalletNotCapableError
from fee_claimer.models import EXTENDED, STANDARD, ClaimBounds
from ledger_fakes import FakeBondingCurve, FakeChain, FakeCpAmm, FakeTokenSdk, FakeWallet, new_address


class ClaimTestCase(unittest.TestCase):

    def setUp(self):
        self.chain = FakeChain()
        self.bonding = FakeBondingCurve(self.chain)
        self.cp_amm = FakeCpAmm(self.chain)
        self.wallet = FakeWallet()

    def service(self, wallet=None):
        return FeeClaimerService(
            self.chain, wallet or self.wallet, self.bonding, self.cp_amm, FakeTokenSdk(self.chain)
        )


class TestClaimPartnerFee(ClaimTestCase):

    def test_partner_claim_submits_with_default_bounds(self):
        pool = self.bonding.add_pool(fee_claimer=self.wallet.public_key)

        signature = self.service().claim_partner_fee(pool.address)

        self.assertEqual(self.chain.submitted_labels(), ['claim_partner_fee'])
        self.assertTrue(signature.endswith('claim_partner_fee'))
        draft = self.chain.submitted[0]
        self.assertEqual(draft.details['bounds'], ClaimBounds(max_base_amount=0, max_quote_amount=1_000_000_000))
        self.assertEqual(draft.fee_payer, self.wallet.public_key)
        self.assertEqual(draft.signers, [self.wallet.public_key])
        self.assertIsNotNone(draft.blockhash)

    def test_unknown_commitment_fails_before_network(self):
        pool = self.bonding.add_pool(fee_claimer=self.wallet.public_key)

        with self.assertRaises(ValidationError):
            self.service().claim_partner_fee(pool.address, commitment='recent')

        self.assertEqual(self.chain.blockhash_requests, 0)
        self.assertEqual(self.chain.account_reads, 0)
        self.assertEqual(self.chain.submitted, [])

    def test_non_claimer_is_rejected_before_any_submission(self):
        partner = new_address()
        pool = self.bonding.add_pool(fee_claimer=partner)

        with self.assertRaises(AuthorizationError) as ctx:
            self.service().claim_partner_fee(pool.address)

        self.assertEqual(ctx.exception.expected, partner)
        self.assertEqual(ctx.exception.actual, self.wallet.public_key)
        self.assertEqual(ctx.exception.step, 'authorize')
        self.assertEqual(self.chain.submitted, [])
        self.assertEqual(self.chain.blockhash_requests, 0)
        self.assertEqual(self.wallet.signed, [])

    def test_skip_validation_logs_warning_and_submits(self):
        pool = self.bonding.add_pool(fee_claimer=new_address())

        with self.assertLogs('fee_claimer.processors.authorization_guard', level='WARNING') as logs:
            self.service().claim_partner_fee(pool.address, skip_validation=True)

        self.assertTrue(any('skipped' in line for line in logs.output))
        self.assertEqual(self.chain.submitted_labels(), ['claim_partner_fee'])

    def test_pool_resolved_by_base_mint(self):
        pool = self.bonding.add_pool(fee_claimer=self.wallet.public_key)

        self.service().claim_partner_fee(pool.base_mint)

        self.assertEqual(self.chain.submitted[0].details['pool'].address, pool.address)

    def test_unknown_pool(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.service().claim_partner_fee(new_address())
        self.assertEqual(ctx.exception.step, 'resolve')

    def test_mixed_token_programs_resolved_independently(self):
        pool = self.bonding.add_pool(fee_claimer=self.wallet.public_key, base_program=EXTENDED,
                                     quote_program=STANDARD)

        self.service().claim_partner_fee(pool.address)

        details = self.chain.submitted[0].details
        self.assertEqual(details['base_binding'].program, EXTENDED)
        self.assertEqual(details['quote_binding'].program, STANDARD)

    def test_negative_bounds_rejected(self):
        pool = self.bonding.add_pool(fee_claimer=self.wallet.public_key)

        with self.assertRaises(ValidationError):
            self.service().claim_partner_fee(pool.address, bounds=ClaimBounds(max_base_amount=-1))
        self.assertEqual(self.chain.submitted, [])

    def test_wallet_refusal_wraps_cause_and_names_step(self):
        wallet = FakeWallet(refuse=True)
        pool = self.bonding.add_pool(fee_claimer=wallet.public_key)

        with self.assertRaises(SubmissionError) as ctx:
            self.service(wallet).claim_partner_fee(pool.address)

        self.assertEqual(ctx.exception.step, 'claim/sign')
        self.assertIsInstance(ctx.exception.__cause__, RuntimeError)
        self.assertFalse(ctx.exception.workflow_result.succeeded)
        self.assertEqual(self.chain.submitted, [])

    def test_gateway_failure_becomes_submission_error(self):
        pool = self.bonding.add_pool(fee_claimer=self.wallet.public_key)
        self.chain.fail_labels.add('claim_partner_fee')

        with self.assertRaises(SubmissionError) as ctx:
            self.service().claim_partner_fee(pool.address)

        self.assertEqual(ctx.exception.step, 'claim/submit')
        self.assertIn('custom program error', str(ctx.exception))

    def test_disconnected_wallet(self):
        class Disconnected(FakeWallet):
            @property
            def public_key(self):
                return None

        pool = self.bonding.add_pool(fee_claimer=new_address())
        with self.assertRaises(WalletNotCapableError):
            self.service(Disconnected()).claim_partner_fee(pool.address)


class TestClaimCreatorFee(ClaimTestCase):

    def test_creator_claim_has_no_partner_guard(self):
        pool = self.bonding.add_pool(fee_claimer=new_address(), creator=self.wallet.public_key)
        receiver = new_address()

        self.service().claim_creator_fee(pool.address, receiver=receiver)

        draft = self.chain.submitted[0]
        self.assertEqual(draft.label, 'claim_creator_fee')
        self.assertEqual(draft.details['creator'], self.wallet.public_key)
        self.assertEqual(draft.details['receiver'], receiver)
        self.assertIsNone(draft.details['temp_wsol_account'])

    def test_invalid_receiver(self):
        pool = self.bonding.add_pool(creator=self.wallet.public_key)
        with self.assertRaises(ValidationError):
            self.service().claim_creator_fee(pool.address, receiver='not-an-address')
        self.assertEqual(self.chain.submitted, [])


class TestClaimPositionFee(ClaimTestCase):

    def test_zero_bounds_still_submit(self):
        pool = self.cp_amm.add_pool(base_program=EXTENDED)
        position = self.cp_amm.add_position(pool.address, self.wallet.public_key, liquidity=10_000)

        signature = self.service().claim_position_fee(position, bounds=ClaimBounds(0, 0))

        self.assertTrue(signature)
        draft = self.chain.submitted[0]
        self.assertEqual(draft.label, 'claim_position_fee')
        self.assertEqual(draft.details['bounds'], ClaimBounds(0, 0))
        self.assertEqual(draft.details['position'], position)
        self.assertEqual(draft.details['position_nft_account'], self.cp_amm.positions[position]['nft_account'])
        self.assertEqual(draft.details['pool'].base_vault, pool.base_vault)
        self.assertEqual(draft.details['base_binding'].program, EXTENDED)

    def test_position_held_by_someone_else(self):
        pool = self.cp_amm.add_pool()
        position = self.cp_amm.add_position(pool.address, new_address(), liquidity=10)

        with self.assertRaises(NotFoundError):
            self.service().claim_position_fee(position)
        self.assertEqual(self.chain.submitted, [])


if __name__ == '__main__':
    unittest.main()
