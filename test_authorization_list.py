import unittest
from unittest.mock import patch

from fee_claimer.config import authorization
from fee_claimer.config.authorization import OPERATOR_ROLE, parse_authorization_list


class TestAuthorizationList(unittest.TestCase):

    def test_parse_entries(self):
        entries = parse_authorization_list('walletA, walletB:viewer\nwalletC:operator,,')
        self.assertEqual(dict(entries), {'walletA': OPERATOR_ROLE, 'walletB': 'viewer', 'walletC': OPERATOR_ROLE})

    def test_conflicting_duplicate_keeps_first_role(self):
        entries = parse_authorization_list('walletA:viewer,walletA:operator')
        self.assertEqual(entries['walletA'], 'viewer')

    def test_empty(self):
        self.assertEqual(len(parse_authorization_list(None)), 0)

    def test_read_only(self):
        entries = parse_authorization_list('walletA')
        with self.assertRaises(TypeError):
            entries['walletB'] = OPERATOR_ROLE

    def test_role_lookup(self):
        with patch.object(authorization, 'AUTHORIZED_WALLETS', parse_authorization_list('op,watcher:viewer')):
            self.assertTrue(authorization.is_wallet_authorized('op'))
            self.assertFalse(authorization.is_wallet_authorized('watcher'))
            self.assertTrue(authorization.is_wallet_authorized('watcher', 'viewer'))
            self.assertFalse(authorization.is_wallet_authorized('stranger'))
            self.assertIsNone(authorization.get_wallet_role(None))


if __name__ == '__main__':
    unittest.main()
