import unittest
from unittest.mock import MagicMock

from fee_claimer.errors import AuthorizationError, FeeClaimerError, LedgerRpcError, NotFoundError
from fee_claimer.models import Pool, PoolConfig
from fee_claimer.processors import AuthorizationGuard
from ledger_fakes import new_address


class TestAuthorizationGuard(unittest.TestCase):

    def setUp(self):
        self.partner = new_address()
        self.pool = Pool(address=new_address(), base_mint=new_address(), quote_mint=new_address(),
                         config=new_address(), fee_claimer=new_address())
        self.sdk = MagicMock()
        self.sdk.get_pool.return_value = self.pool
        self.sdk.get_pool_config.return_value = PoolConfig(address=self.pool.config, fee_claimer=self.partner)
        self.guard = AuthorizationGuard(self.sdk)

    def test_partner_comes_from_pool_config(self):
        info = self.guard.get_partner_info(self.pool.address)

        self.assertEqual(info.partner_address, self.partner)
        self.assertEqual(info.config_address, self.pool.config)
        self.sdk.get_pool_config.assert_called_once_with(self.pool.config)

    def test_declared_partner_is_permitted(self):
        decision = self.guard.check_partner(self.pool.address, self.partner)
        self.assertTrue(decision.permitted)
        self.assertFalse(decision.skipped)
        self.assertTrue(self.guard.is_partner_for_pool(self.pool.address, self.partner))

    def test_pool_record_fee_claimer_is_not_trusted(self):
        self.assertFalse(self.guard.is_partner_for_pool(self.pool.address, self.pool.fee_claimer))

    def test_require_partner_raises_with_expected_and_actual(self):
        caller = new_address()
        with self.assertRaises(AuthorizationError) as ctx:
            self.guard.require_partner(self.pool.address, caller)
        self.assertEqual(ctx.exception.expected, self.partner)
        self.assertEqual(ctx.exception.actual, caller)

    def test_skip_validation_does_not_read_config(self):
        with self.assertLogs('fee_claimer.processors.authorization_guard', level='WARNING'):
            decision = self.guard.require_partner(self.pool.address, new_address(), skip_validation=True)
        self.assertTrue(decision.skipped)
        self.sdk.get_pool.assert_not_called()

    def test_pool_without_config(self):
        self.sdk.get_pool.return_value = Pool(address=self.pool.address, base_mint=new_address(),
                                              quote_mint=new_address())
        decision = self.guard.check_partner(self.pool.address, self.partner)
        self.assertFalse(decision.permitted)
        self.assertIsNone(decision.expected)

    def test_missing_pool(self):
        self.sdk.get_pool.return_value = None
        with self.assertRaises(NotFoundError):
            self.guard.get_partner_info(self.pool.address)

    def test_pool_read_failure_names_step(self):
        self.sdk.get_pool.side_effect = LedgerRpcError('connection reset')
        with self.assertRaises(FeeClaimerError) as ctx:
            self.guard.check_partner(self.pool.address, self.partner)
        self.assertEqual(ctx.exception.step, 'get_partner_info')
        self.assertIsInstance(ctx.exception.__cause__, LedgerRpcError)

    def test_config_read_failure_names_step(self):
        self.sdk.get_pool_config.side_effect = LedgerRpcError('connection reset')
        with self.assertRaises(FeeClaimerError) as ctx:
            self.guard.get_partner_info(self.pool.address)
        self.assertEqual(ctx.exception.step, 'get_partner_info')
        self.assertIsInstance(ctx.exception.__cause__, LedgerRpcError)


if __name__ == '__main__':
    unittest.main()
