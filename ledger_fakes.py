"""
In-memory stand-ins for the ledger gateway, protocol SDKs and wallet.

FakeChain keeps accounts, token balances and positions; drafts built by the
fake SDKs carry an `effect` that is applied when the chain settles them.
"""

from typing import Callable, Dict, List, Optional

from solders.pubkey import Pubkey

from fee_claimer.errors import LedgerRpcError
from fee_claimer.ledger import AccountInfo
from fee_claimer.models import (
    CONSTANT_PRODUCT,
    EXTENDED,
    PROGRAM_IDS,
    STANDARD,
    FeeMetricsSnapshot,
    Pool,
    PoolConfig,
    PositionHandle,
    PositionState,
    UnclaimedFees,
)
from fee_claimer.sdk import BondingCurveSdk, CpAmmSdk, FeeAccounting, TokenProgramSdk
from fee_claimer.wallet import Wallet


def new_address() -> str:
    return str(Pubkey.new_unique())


def _signer_id(signer) -> str:
    if hasattr(signer, 'pubkey'):
        return str(signer.pubkey())
    if hasattr(signer, 'public_key'):
        return str(signer.public_key)
    return str(signer)


class FakeDraft:
    def __init__(self, label: str, effect: Optional[Callable[[], None]] = None, **details):
        self.label = label
        self.effect = effect
        self.details = details
        self.blockhash = None
        self.fee_payer = None
        self.signers: List[str] = []

    def stamp(self, blockhash, fee_payer):
        self.blockhash = blockhash
        self.fee_payer = fee_payer
        return self

    def partial_sign(self, signers):
        if self.blockhash is None:
            raise ValueError(f'{self.label} signed before stamping')
        self.signers.extend(_signer_id(s) for s in signers)
        return self

    def serialize(self) -> bytes:
        return f'{self.label}:{id(self)}'.encode()


class FakeWallet(Wallet):
    def __init__(self, address: str = None, refuse: bool = False):
        self._address = address or new_address()
        self.refuse = refuse
        self.signed: List[FakeDraft] = []

    @property
    def public_key(self):
        return self._address

    def sign(self, transaction):
        if self.refuse:
            raise RuntimeError('User rejected the request')
        self.signed.append(transaction)
        return transaction.partial_sign([self])


class FakeChain:
    """Ledger gateway double. Settles drafts by running their effect."""

    def __init__(self):
        self.accounts: Dict[str, AccountInfo] = {}
        self.token_balances: Dict[str, int] = {}
        self.submitted: List[FakeDraft] = []
        self.account_reads = 0
        self.blockhash_requests = 0
        self.fail_labels = set()
        self._pending: Dict[bytes, FakeDraft] = {}
        self._sig_counter = 0

    # helpers for test setup
    def add_account(self, address: str, owner: str) -> str:
        self.accounts[address] = AccountInfo(address=address, owner=owner, lamports=1_461_600)
        return address

    def add_mint(self, program: str = STANDARD) -> str:
        return self.add_account(new_address(), PROGRAM_IDS[program])

    # gateway interface
    def get_account_info(self, address: str):
        self.account_reads += 1
        return self.accounts.get(address)

    def get_latest_blockhash(self, commitment: str = None) -> str:
        self.blockhash_requests += 1
        return f'blockhash-{self.blockhash_requests}'

    def send_and_confirm(self, raw_transaction: bytes, commitment: str = None) -> str:
        draft = self._pending.pop(raw_transaction, None) or self._lookup(raw_transaction)
        if draft.label in self.fail_labels:
            raise LedgerRpcError(f'Transaction {draft.label} failed: custom program error')
        if draft.effect:
            draft.effect()
        self.submitted.append(draft)
        self._sig_counter += 1
        return f'sig{self._sig_counter}-{draft.label}'

    def track(self, draft: FakeDraft) -> FakeDraft:
        self._pending[draft.serialize()] = draft
        return draft

    def _lookup(self, raw_transaction: bytes) -> FakeDraft:
        raise LedgerRpcError(f'Unknown transaction {raw_transaction!r}')

    def submitted_labels(self) -> List[str]:
        return [d.label for d in self.submitted]


class FakeBondingCurve(BondingCurveSdk):
    def __init__(self, chain: FakeChain):
        self.chain = chain
        self.pools: Dict[str, Pool] = {}
        self.configs: Dict[str, PoolConfig] = {}
        self.metrics: Dict[str, FeeMetricsSnapshot] = {}
        self.progress: Dict[str, float] = {}
        self.migrated_address = new_address()
        self.derive_calls = []

    def add_pool(self, fee_claimer: str = None, creator: str = None, base_program: str = STANDARD,
                 quote_program: str = STANDARD, migration_fee_option: int = 0) -> Pool:
        config = new_address()
        self.configs[config] = PoolConfig(address=config, fee_claimer=fee_claimer,
                                          migration_fee_option=migration_fee_option)
        pool = Pool(
            address=new_address(),
            base_mint=self.chain.add_mint(base_program),
            quote_mint=self.chain.add_mint(quote_program),
            config=config,
            creator=creator,
        )
        self.pools[pool.address] = pool
        return pool

    def get_pool(self, pool):
        return self.pools.get(pool)

    def get_pool_by_base_mint(self, base_mint):
        return next((p for p in self.pools.values() if p.base_mint == base_mint), None)

    def get_pool_config(self, config):
        return self.configs.get(config)

    def get_pool_fee_metrics(self, pool):
        return self.metrics.get(pool)

    def get_pool_curve_progress(self, pool):
        return self.progress.get(pool)

    def build_claim_partner_fee(self, pool, fee_claimer, payer, base_binding, quote_binding, bounds):
        return self.chain.track(FakeDraft(
            'claim_partner_fee', pool=pool, fee_claimer=fee_claimer, payer=payer,
            base_binding=base_binding, quote_binding=quote_binding, bounds=bounds,
        ))

    def build_claim_creator_fee(self, pool, creator, payer, base_binding, quote_binding, bounds,
                                receiver=None, temp_wsol_account=None):
        return self.chain.track(FakeDraft(
            'claim_creator_fee', pool=pool, creator=creator, payer=payer, base_binding=base_binding,
            quote_binding=quote_binding, bounds=bounds, receiver=receiver, temp_wsol_account=temp_wsol_account,
        ))

    def derive_damm_v2_pool_address(self, damm_config, token_a_mint, token_b_mint):
        self.derive_calls.append((damm_config, token_a_mint, token_b_mint))
        return self.migrated_address


class FakeCpAmm(CpAmmSdk):
    """
    CP-AMM double. `index_lag` hides newly created positions from that many
    listings, mimicking an indexer that trails the chain.
    """

    split_position_denominator = 10_000

    def __init__(self, chain: FakeChain):
        self.chain = chain
        self.pools: Dict[str, Pool] = {}
        self.positions: Dict[str, dict] = {}
        self.index_lag = 0
        self.created = 0
        self.listing_calls = 0

    def add_pool(self, base_program: str = STANDARD, quote_program: str = STANDARD) -> Pool:
        pool = Pool(
            address=new_address(),
            base_mint=self.chain.add_mint(base_program),
            quote_mint=self.chain.add_mint(quote_program),
            kind=CONSTANT_PRODUCT,
            base_vault=new_address(),
            quote_vault=new_address(),
        )
        self.pools[pool.address] = pool
        return pool

    def add_position(self, pool: str, owner: str, liquidity: int, fee_a: int = None, fee_b: int = None,
                     hidden_listings: int = 0) -> str:
        address = new_address()
        nft_mint = self.chain.add_mint(EXTENDED)
        nft_account = new_address()
        self.chain.token_balances[nft_account] = 1
        self.positions[address] = {
            'pool': pool,
            'owner': owner,
            'liquidity': liquidity,
            'nft_mint': nft_mint,
            'nft_account': nft_account,
            'fee_a': fee_a,
            'fee_b': fee_b,
            'hidden': hidden_listings,
        }
        return address

    def _state(self, address: str) -> PositionState:
        p = self.positions[address]
        return PositionState(
            address=address, pool=p['pool'], nft_mint=p['nft_mint'], liquidity=p['liquidity'],
            owner=p['owner'], unclaimed_fee_a=p['fee_a'], unclaimed_fee_b=p['fee_b'],
        )

    def _handles(self, predicate) -> List[PositionHandle]:
        self.listing_calls += 1
        handles = []
        for address, p in self.positions.items():
            if not predicate(p):
                continue
            if p['hidden'] > 0:
                p['hidden'] -= 1
                continue
            handles.append(PositionHandle(position=address, position_nft_account=p['nft_account'],
                                          state=self._state(address)))
        return handles

    def fetch_pool_state(self, pool):
        return self.pools.get(pool)

    def fetch_position_state(self, position):
        if position not in self.positions:
            return None
        return self._state(position)

    def get_positions_by_user(self, owner):
        return self._handles(lambda p: p['owner'] == owner)

    def get_user_positions_by_pool(self, pool, owner):
        return self._handles(lambda p: p['owner'] == owner and p['pool'] == pool)

    def build_create_position(self, owner, payer, pool, position_nft_mint):
        def effect():
            self.created += 1
            address = new_address()
            nft_account = new_address()
            self.chain.add_account(position_nft_mint, PROGRAM_IDS[EXTENDED])
            self.chain.token_balances[nft_account] = 1
            self.positions[address] = {
                'pool': pool, 'owner': owner, 'liquidity': 0, 'nft_mint': position_nft_mint,
                'nft_account': nft_account, 'fee_a': None, 'fee_b': None, 'hidden': self.index_lag,
            }
        return self.chain.track(FakeDraft('create_position', effect, owner=owner, payer=payer, pool=pool,
                                          position_nft_mint=position_nft_mint))

    def build_split_position(self, pool, first_position_owner, second_position_owner, first_position,
                             first_position_nft_account, second_position, second_position_nft_account, numerator):
        def effect():
            moved = self.positions[first_position]['liquidity'] * numerator // self.split_position_denominator
            self.positions[first_position]['liquidity'] -= moved
            self.positions[second_position]['liquidity'] += moved
        return self.chain.track(FakeDraft('split_position', effect, pool=pool, first_position=first_position,
                                          second_position=second_position, numerator=numerator))

    def build_claim_position_fee(self, owner, pool, position, position_nft_account, base_binding, quote_binding,
                                 bounds, receiver=None, temp_wsol_account=None):
        return self.chain.track(FakeDraft(
            'claim_position_fee', owner=owner, pool=pool, position=position,
            position_nft_account=position_nft_account, base_binding=base_binding, quote_binding=quote_binding,
            bounds=bounds, receiver=receiver, temp_wsol_account=temp_wsol_account,
        ))


class FakeCpAmmWithAccounting(FakeCpAmm, FeeAccounting):
    """Computes unclaimed fees as a fixed share of liquidity."""

    def compute_unclaimed_fees(self, pool, position):
        return UnclaimedFees(fee_token_a=position.liquidity // 100, fee_token_b=position.liquidity // 1000)


class FakeTokenSdk(TokenProgramSdk):
    def __init__(self, chain: FakeChain, create_has_effect: bool = True):
        self.chain = chain
        self.create_has_effect = create_has_effect

    def build_create_associated_account(self, payer, account, owner, binding):
        def effect():
            if self.create_has_effect:
                self.chain.add_account(account, binding.program_id)
        return self.chain.track(FakeDraft('create_associated_account', effect, payer=payer, account=account,
                                          owner=owner, binding=binding))

    def build_transfer_checked(self, source, destination, authority, binding, amount, decimals):
        def effect():
            if self.chain.token_balances.get(source, 0) < amount:
                raise LedgerRpcError('insufficient funds')
            self.chain.token_balances[source] -= amount
            self.chain.token_balances[destination] = self.chain.token_balances.get(destination, 0) + amount
        return self.chain.track(FakeDraft('transfer_checked', effect, source=source, destination=destination,
                                          authority=authority, binding=binding, amount=amount, decimals=decimals))


class FakeClock:
    """Deterministic sleep/monotonic pair."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds

    def __call__(self):
        return self.now
