import unittest

from fee_claimer.sdk import BondingCurveSdk, CpAmmSdk, load_sdk
from ledger_fakes import FakeChain, FakeCpAmm


class TestLoadSdk(unittest.TestCase):

    def test_loads_adapter_with_constructor_args(self):
        chain = FakeChain()
        sdk = load_sdk('ledger_fakes:FakeCpAmm', CpAmmSdk, chain)
        self.assertIsInstance(sdk, FakeCpAmm)
        self.assertIs(sdk.chain, chain)

    def test_rejects_malformed_spec(self):
        for bad in (None, '', 'ledger_fakes.FakeCpAmm'):
            with self.subTest(spec=bad):
                with self.assertRaises(ValueError):
                    load_sdk(bad, CpAmmSdk)

    def test_rejects_missing_module_or_class(self):
        with self.assertRaises(ValueError):
            load_sdk('no_such_module_here:Sdk', CpAmmSdk)
        with self.assertRaises(ValueError):
            load_sdk('ledger_fakes:Missing', CpAmmSdk)

    def test_rejects_wrong_capability(self):
        with self.assertRaises(ValueError):
            load_sdk('ledger_fakes:FakeCpAmm', BondingCurveSdk, FakeChain())


if __name__ == '__main__':
    unittest.main()
