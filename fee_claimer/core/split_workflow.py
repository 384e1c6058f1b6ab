import logging
import math
import time
from fractions import Fraction
from typing import Iterable, List, Optional, Set

from solders.keypair import Keypair

from ..addresses import derive_associated_token_address, normalize_address
from ..config import Config
from ..errors import AccountCreationTimeoutError, IndexingTimeoutError, NotFoundError, ValidationError
from ..models import Position, WorkflowResult
from ..wallet import require_signer
from .steps import TransactionRunner, tracked_workflow, validate_commitment, workflow_step

logger = logging.getLogger(__name__)

SPLIT_TO_RECIPIENT = 'split_position_to_recipient'

# Position NFTs are non-fungible
NFT_AMOUNT = 1
NFT_DECIMALS = 0


def validate_percent(percent) -> Fraction:
    if isinstance(percent, bool) or not isinstance(percent, (int, float, Fraction)):
        raise ValidationError(f'Split percent must be a number, got {percent!r}')
    if isinstance(percent, float) and not math.isfinite(percent):
        raise ValidationError(f'Split percent must be finite, got {percent!r}')
    value = Fraction(str(percent)) if isinstance(percent, float) else Fraction(percent)
    if not (0 < value <= 100):
        raise ValidationError(f'Split percent must satisfy 0 < percent <= 100, got {percent}')
    return value


def split_numerator(denominator: int, percent) -> int:
    """floor(denominator * percent / 100), computed exactly."""
    return math.floor(Fraction(denominator) * validate_percent(percent) / 100)


class SplitTransferWorkflow:
    """
    Move a share of the caller's position in a CP-AMM pool to a recipient:
    create a second position, split liquidity into it, then hand its NFT to
    the recipient.

    Each step settles on its own; there is no rollback. A re-run re-derives
    everything from chain state, so an empty second position left behind by
    an interrupted run is reused rather than duplicated.
    """

    def __init__(
        self,
        locator,
        resolver,
        cp_amm_sdk,
        token_sdk,
        ledger,
        commitment: str = None,
        sleep=time.sleep,
        clock=time.monotonic,
    ):
        self.locator = locator
        self.resolver = resolver
        self.cp_amm = cp_amm_sdk
        self.token_sdk = token_sdk
        self.ledger = ledger
        self.runner = TransactionRunner(ledger, commitment)
        self._sleep = sleep
        self._clock = clock

    def split_position_to_recipient(
        self,
        pool: str,
        recipient: str,
        percent,
        wallet,
        commitment: str = None,
    ) -> WorkflowResult:
        numerator = split_numerator(self.cp_amm.split_position_denominator, percent)
        if numerator == 0:
            raise ValidationError(f'Split percent {percent} rounds to a zero share of the position')
        commitment = validate_commitment(commitment, self.runner.commitment)
        pool = normalize_address(pool, 'pool')
        recipient = normalize_address(recipient, 'recipient')
        caller = require_signer(wallet)
        if recipient == caller:
            logger.warning('Recipient is the caller itself; the NFT transfer will be a self-transfer')

        result = WorkflowResult(workflow=SPLIT_TO_RECIPIENT)
        with tracked_workflow(result):
            logger.info('=' * 60)
            logger.info('SPLIT POSITION TO RECIPIENT')
            logger.info(f'  Pool: {pool}')
            logger.info(f'  Recipient: {recipient}')
            logger.info(f'  Split %: {percent} (numerator {numerator}/{self.cp_amm.split_position_denominator})')
            logger.info('=' * 60)

            logger.info('📋 STEP 1: Locating existing position...')
            with workflow_step('locate_position'):
                positions = self.locator.list_positions_in_pool(pool, caller)
                source = self._pick_source(positions)
            logger.info(f'   ✅ Position: {source.address} (liquidity {source.liquidity})')
            logger.info(f'   ✅ Position NFT account: {source.nft_account}')

            second = self._pick_leftover_second(positions, source)
            if second is not None:
                logger.info(f'📋 STEP 2: Reusing empty second position {second.address} from an earlier run')
            else:
                second = self._create_second_position(pool, caller, wallet, positions, result, commitment)
            logger.info(f'   ✅ Second position: {second.address}')
            logger.info(f'   ✅ Second position NFT account: {second.nft_account}')

            logger.info(f'📤 STEP 4: Splitting {percent}% into the second position...')
            with workflow_step('split'):
                draft = self.cp_amm.build_split_position(
                    pool=pool,
                    first_position_owner=caller,
                    second_position_owner=caller,
                    first_position=source.address,
                    first_position_nft_account=source.nft_account,
                    second_position=second.address,
                    second_position_nft_account=second.nft_account,
                    numerator=numerator,
                )
            split_sig = self.runner.submit(draft, wallet, caller, step='split', commitment=commitment)
            result.record('split', split_sig)

            logger.info('📤 STEP 5: Resolving position NFT mint and token program...')
            with workflow_step('resolve_nft_mint'):
                state = self.cp_amm.fetch_position_state(second.address)
                if state is None:
                    raise NotFoundError(f'Position state not found: {second.address}', address=second.address)
                binding = self.resolver.resolve(state.nft_mint)
            logger.info(f'   NFT mint: {binding.mint} ({binding.program} program)')

            with workflow_step('derive_recipient_account'):
                destination = derive_associated_token_address(recipient, binding.mint, binding.program)
            logger.info(f'📋 STEP 6: Recipient token account (derived): {destination}')

            logger.info('📤 STEP 7: Checking recipient token account...')
            self._ensure_account(destination, recipient, binding, caller, wallet, result, commitment)

            logger.info('📤 STEP 8: Transferring position NFT...')
            with workflow_step('transfer'):
                draft = self.token_sdk.build_transfer_checked(
                    source=second.nft_account,
                    destination=destination,
                    authority=caller,
                    binding=binding,
                    amount=NFT_AMOUNT,
                    decimals=NFT_DECIMALS,
                )
            transfer_sig = self.runner.submit(draft, wallet, caller, step='transfer', commitment=commitment)
            result.record('transfer', transfer_sig)
            result.signature = transfer_sig

            logger.info('=' * 60)
            logger.info('SUCCESS! POSITION SPLIT AND TRANSFERRED')
            logger.info(f'   Recipient: {recipient}')
            logger.info(f'   Split amount: {percent}%')
            logger.info(f'   Position NFT: {binding.mint}')
            logger.info('=' * 60)
        return result

    def _pick_source(self, positions: List[Position]) -> Position:
        if not positions:
            raise NotFoundError('Caller has no position to split in this pool')
        source = max(positions, key=lambda p: p.liquidity)
        if source.liquidity <= 0:
            raise NotFoundError('Caller has no position with liquidity to split in this pool', address=source.address)
        return source

    def _pick_leftover_second(self, positions: List[Position], source: Position) -> Optional[Position]:
        for p in positions:
            if p.address != source.address and p.liquidity == 0:
                return p
        return None

    def _create_second_position(self, pool, caller, wallet, positions, result, commitment) -> Position:
        logger.info('📤 STEP 2: Creating second position for the same owner...')
        nft_keypair = Keypair()
        nft_mint = str(nft_keypair.pubkey())
        logger.info(f'   Second position NFT mint: {nft_mint}')
        with workflow_step('create_position'):
            draft = self.cp_amm.build_create_position(
                owner=caller,
                payer=caller,
                pool=pool,
                position_nft_mint=nft_mint,
            )
        create_sig = self.runner.submit(
            draft, wallet, caller, step='create_position', extra_signers=[nft_keypair], commitment=commitment
        )
        result.record('create_position', create_sig)

        logger.info('📋 STEP 3: Waiting for the new position to be indexed...')
        with workflow_step('locate_new_position'):
            return self._await_new_position(pool, caller, nft_mint, {p.address for p in positions})

    def _await_new_position(self, pool: str, owner: str, nft_mint: str, known: Set[str]) -> Position:
        self._sleep(Config.INDEXING_SETTLE_DELAY_SECONDS)
        deadline = self._clock() + Config.INDEXING_TIMEOUT_SECONDS
        attempt = 0
        while True:
            attempt += 1
            found = self._match_new_position(self.locator.list_positions_in_pool(pool, owner), nft_mint, known)
            if found is not None:
                logger.info(f'   Found new position after {attempt} listing(s)')
                return found
            if self._clock() >= deadline:
                raise IndexingTimeoutError(
                    f'Second position (NFT mint {nft_mint}) not visible in pool {pool} '
                    f'after {Config.INDEXING_TIMEOUT_SECONDS}s; it may exist on-chain, re-run to resume'
                )
            logger.debug(f'   New position not indexed yet (attempt {attempt})')
            self._sleep(Config.INDEXING_POLL_INTERVAL_SECONDS)

    @staticmethod
    def _match_new_position(positions: Iterable[Position], nft_mint: str, known: Set[str]) -> Optional[Position]:
        positions = list(positions)
        for p in positions:
            if p.nft_mint == nft_mint:
                return p
        for p in positions:
            if p.address not in known:
                return p
        return None

    def _ensure_account(self, destination, recipient, binding, caller, wallet, result, commitment):
        with workflow_step('check_recipient_account'):
            exists = self.ledger.get_account_info(destination) is not None
        logger.info(f'   Recipient token account exists on-chain: {exists}')
        if exists:
            return

        logger.info('   ⚠️  Account missing. Creating it (caller pays rent)...')
        with workflow_step('create_recipient_account'):
            draft = self.token_sdk.build_create_associated_account(
                payer=caller,
                account=destination,
                owner=recipient,
                binding=binding,
            )
        create_sig = self.runner.submit(draft, wallet, caller, step='create_recipient_account', commitment=commitment)
        result.record('create_recipient_account', create_sig)

        with workflow_step('verify_recipient_account'):
            deadline = self._clock() + Config.ACCOUNT_CREATION_TIMEOUT_SECONDS
            while self.ledger.get_account_info(destination) is None:
                if self._clock() >= deadline:
                    raise AccountCreationTimeoutError(
                        f'Recipient token account {destination} still missing '
                        f'{Config.ACCOUNT_CREATION_TIMEOUT_SECONDS}s after creation'
                    )
                self._sleep(Config.ACCOUNT_POLL_INTERVAL_SECONDS)
        logger.info('   ✅ Recipient token account exists after creation')
