import base64
import unittest
from unittest.mock import MagicMock, patch

import requests

from fee_claimer.errors import LedgerRpcError
from fee_claimer.ledger import SolanaRpcClient, commitment_reached
from fee_claimer.models import TOKEN_2022_PROGRAM_ID


def rpc_response(result=None, error=None):
    resp = MagicMock()
    body = {'jsonrpc': '2.0', 'id': 1}
    if error is not None:
        body['error'] = error
    else:
        body['result'] = result
    resp.json.return_value = body
    return resp


class TestSolanaRpcClient(unittest.TestCase):

    @patch('requests.Session')
    def setUp(self, mock_session_cls):
        self.session = MagicMock()
        mock_session_cls.return_value = self.session
        self.client = SolanaRpcClient('http://localhost:8899', timeout=5)

    def test_get_account_info(self):
        self.session.post.return_value = rpc_response({'value': {
            'owner': TOKEN_2022_PROGRAM_ID,
            'lamports': 1461600,
            'data': [base64.b64encode(b'\x01\x02').decode(), 'base64'],
            'executable': False,
        }})

        account = self.client.get_account_info('mint')

        self.assertEqual(account.owner, TOKEN_2022_PROGRAM_ID)
        self.assertEqual(account.data, b'\x01\x02')
        payload = self.session.post.call_args.kwargs['json']
        self.assertEqual(payload['method'], 'getAccountInfo')
        self.assertEqual(payload['params'][0], 'mint')

    def test_missing_account_is_none(self):
        self.session.post.return_value = rpc_response({'value': None})
        self.assertIsNone(self.client.get_account_info('nothing'))

    def test_rpc_error(self):
        self.session.post.return_value = rpc_response(error={'code': -32602, 'message': 'Invalid param'})
        with self.assertRaises(LedgerRpcError) as ctx:
            self.client.get_latest_blockhash()
        self.assertIn('Invalid param', str(ctx.exception))

    def test_transport_error_is_chained(self):
        self.session.post.side_effect = requests.ConnectionError('refused')
        with self.assertRaises(LedgerRpcError) as ctx:
            self.client.get_account_info('mint')
        self.assertIsInstance(ctx.exception.__cause__, requests.ConnectionError)

    def test_latest_blockhash(self):
        self.session.post.return_value = rpc_response({'value': {'blockhash': 'abc', 'lastValidBlockHeight': 10}})
        self.assertEqual(self.client.get_latest_blockhash('finalized'), 'abc')
        payload = self.session.post.call_args.kwargs['json']
        self.assertEqual(payload['params'], [{'commitment': 'finalized'}])

    def test_send_and_confirm_waits_for_commitment(self):
        self.session.post.side_effect = [
            rpc_response('sig1'),
            rpc_response({'value': [{'confirmationStatus': 'processed', 'err': None}]}),
            rpc_response({'value': [{'confirmationStatus': 'confirmed', 'err': None}]}),
        ]
        with patch('fee_claimer.ledger.rpc_client.time.sleep'):
            signature = self.client.send_and_confirm(b'raw', 'confirmed')

        self.assertEqual(signature, 'sig1')
        sent = self.session.post.call_args_list[0].kwargs['json']
        self.assertEqual(sent['params'][0], base64.b64encode(b'raw').decode())

    def test_failed_transaction(self):
        self.session.post.side_effect = [
            rpc_response('sig1'),
            rpc_response({'value': [{'confirmationStatus': 'confirmed', 'err': {'InstructionError': [0, 'x']}}]}),
        ]
        with self.assertRaises(LedgerRpcError):
            self.client.send_and_confirm(b'raw')

    def test_unsupported_commitment(self):
        with self.assertRaises(LedgerRpcError):
            self.client.send_and_confirm(b'raw', 'recent')
        self.session.post.assert_not_called()


class TestCommitmentReached(unittest.TestCase):

    def test_ordering(self):
        self.assertTrue(commitment_reached('finalized', 'confirmed'))
        self.assertTrue(commitment_reached('confirmed', 'confirmed'))
        self.assertFalse(commitment_reached('processed', 'confirmed'))
        self.assertFalse(commitment_reached(None, 'processed'))


if __name__ == '__main__':
    unittest.main()
