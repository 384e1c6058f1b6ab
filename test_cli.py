import unittest
from unittest.mock import MagicMock, patch

from fee_claimer.core import main as cli
from fee_claimer.errors import AuthorizationError, WalletNotCapableError
from fee_claimer.models import ClaimBounds, FeeMetricsSnapshot, PoolPartnerInfo, Position
from ledger_fakes import FakeWallet, new_address


class TestCli(unittest.TestCase):

    def setUp(self):
        self.wallet = FakeWallet()
        patcher = patch.object(cli, 'KeypairWallet')
        self.keypair_wallet = patcher.start()
        self.keypair_wallet.from_env.return_value = self.wallet
        self.addCleanup(patcher.stop)
        patcher = patch.object(cli, 'setup_logging')
        patcher.start()
        self.addCleanup(patcher.stop)

    @patch.object(cli, 'build_service')
    @patch.object(cli, 'is_wallet_authorized', return_value=False)
    def test_unauthorized_operator_cannot_claim(self, _authorized, build_service):
        with self.assertRaises(SystemExit) as ctx:
            cli.main(['claim-partner', '--pool', new_address()])
        self.assertEqual(ctx.exception.code, 1)
        build_service.assert_not_called()

    @patch.object(cli, 'build_service')
    @patch.object(cli, 'is_wallet_authorized', return_value=True)
    def test_claim_partner_passes_bounds(self, _authorized, build_service):
        service = MagicMock()
        service.claim_partner_fee.return_value = 'sig'
        build_service.return_value = service
        pool = new_address()

        cli.main(['claim-partner', '--pool', pool, '--max-quote-amount', '0', '--skip-validation'])

        service.claim_partner_fee.assert_called_once_with(
            pool, bounds=ClaimBounds(max_base_amount=0, max_quote_amount=0), skip_validation=True, commitment=None
        )

    @patch.object(cli, 'build_service')
    @patch.object(cli, 'is_wallet_authorized', return_value=False)
    def test_read_commands_skip_operator_check(self, authorized, build_service):
        service = MagicMock()
        service.list_positions.return_value = []
        service.wallet = self.wallet
        build_service.return_value = service

        cli.main(['positions'])

        service.list_positions.assert_called_once_with(self.wallet.public_key)
        authorized.assert_not_called()

    @patch.object(cli, 'build_service')
    def test_reads_with_explicit_target_need_no_private_key(self, build_service):
        service = MagicMock()
        service.list_positions.return_value = []
        service.get_pool_fee_metrics.return_value = FeeMetricsSnapshot(1, 2, 3, 4, 5, 6)
        service.get_pool_partner_info.return_value = PoolPartnerInfo(partner_address=None, config_address=None)
        build_service.return_value = service
        owner = new_address()

        with patch('builtins.print'):
            cli.main(['positions', '--owner', owner])
            cli.main(['metrics', '--pool', new_address()])
            cli.main(['partner-info', '--pool', new_address()])

        self.keypair_wallet.from_env.assert_not_called()
        build_service.assert_called_with(None, commitment=None)
        service.list_positions.assert_called_once_with(owner)

    @patch.object(cli, 'build_service')
    def test_missing_private_key_only_fails_commands_that_sign(self, build_service):
        self.keypair_wallet.from_env.side_effect = WalletNotCapableError('PRIVATE_KEY is not set in the environment.')
        build_service.return_value = MagicMock()

        with patch('builtins.print'):
            cli.main(['migrated-pool', '--pool', new_address()])
        with self.assertRaises(SystemExit) as ctx:
            cli.main(['split', '--pool', new_address(), '--recipient', new_address(), '--percent', '50'])

        self.assertEqual(ctx.exception.code, 1)
        self.assertEqual(build_service.call_count, 1)

    @patch.object(cli, 'build_service')
    @patch.object(cli, 'is_wallet_authorized', return_value=True)
    def test_workflow_failure_exits_nonzero(self, _authorized, build_service):
        service = MagicMock()
        service.split_position_to_recipient.side_effect = AuthorizationError('nope', expected='a', actual='b')
        build_service.return_value = service

        with self.assertRaises(SystemExit) as ctx:
            cli.main(['split', '--pool', new_address(), '--recipient', new_address(), '--percent', '50'])
        self.assertEqual(ctx.exception.code, 1)

    def test_print_positions_table(self):
        positions = [Position(address=new_address(), nft_account=new_address(), owner=new_address(),
                              pool=new_address(), liquidity=10**25, fee_degraded=True)]
        with patch('builtins.print') as mock_print:
            with self.assertLogs('fee_claimer.core.main', level='WARNING'):
                cli.print_positions(positions)
        mock_print.assert_called_once()

    def test_quote_mint_needs_no_wallet(self):
        with patch('builtins.print') as mock_print:
            cli.main(['quote-mint', 'usdt'])
        mock_print.assert_called_once_with('Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB')
        self.keypair_wallet.from_env.assert_not_called()


if __name__ == '__main__':
    unittest.main()
