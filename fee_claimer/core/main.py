import argparse
import json
import logging
import sys
from typing import List

import polars as pl

from ..config import OPERATOR_ROLE, Config, is_wallet_authorized, setup_logging
from ..errors import FeeClaimerError
from ..ledger import get_ledger_client
from ..models import ClaimBounds, Position, format_token_amount
from ..sdk import BondingCurveSdk, CpAmmSdk, SplTokenSdk, load_sdk
from ..wallet import KeypairWallet
from .service import FeeClaimerService, get_quote_mint_address

logger = logging.getLogger(__name__)

MUTATING_COMMANDS = {'claim-partner', 'claim-creator', 'claim-position', 'split'}


def build_service(wallet, commitment: str = None) -> FeeClaimerService:
    Config.validate()
    if not Config.BONDING_CURVE_SDK or not Config.CP_AMM_SDK:
        raise ValueError('BONDING_CURVE_SDK and CP_AMM_SDK must name SDK adapters as "package.module:ClassName"')
    ledger = get_ledger_client()
    bonding_curve = load_sdk(Config.BONDING_CURVE_SDK, BondingCurveSdk, ledger)
    cp_amm = load_sdk(Config.CP_AMM_SDK, CpAmmSdk, ledger)
    return FeeClaimerService(ledger, wallet, bonding_curve, cp_amm, SplTokenSdk(), commitment=commitment)


def needs_wallet(args) -> bool:
    """Only signing commands and `positions` without an owner read PRIVATE_KEY."""
    return args.command in MUTATING_COMMANDS or (args.command == 'positions' and not args.owner)


def require_operator(wallet):
    address = wallet.public_key
    if not is_wallet_authorized(address, OPERATOR_ROLE):
        raise PermissionError(f'Wallet {address} is not on the authorization list with role {OPERATOR_ROLE!r}')
    logger.info(f'✅ Operator wallet {address} authorized')


def print_positions(positions: List[Position]):
    logger.info('')
    logger.info('=' * 100)
    logger.info('POSITIONS')
    logger.info('=' * 100)
    if not positions:
        logger.info('No positions found')
        return

    df = pl.DataFrame([p.to_row() for p in positions])
    with pl.Config(tbl_rows=-1, tbl_cols=-1, fmt_str_lengths=48):
        print(df)

    logger.info('=' * 100)
    logger.info(f'Total positions: {len(df):,}')
    logger.info(f'Positions with liquidity: {df.filter(pl.col("liquidity") != "0").height:,}')
    degraded = [p.address for p in positions if p.fee_degraded]
    if degraded:
        logger.warning(f'Unclaimed fees unavailable (shown as 0) for: {", ".join(degraded)}')
    logger.info('=' * 100)


def print_metrics(pool: str, snapshot):
    print(json.dumps({'pool': pool, **snapshot.to_dict()}, indent=2))
    logger.info(
        f'Unclaimed partner quote fee: {format_token_amount(snapshot.partner_quote_fee)} | '
        f'creator quote fee: {format_token_amount(snapshot.creator_quote_fee)}'
    )


def _bounds(args) -> ClaimBounds:
    return ClaimBounds(max_base_amount=args.max_base_amount, max_quote_amount=args.max_quote_amount)


def _add_bounds_args(parser):
    parser.add_argument('--max-base-amount', type=int, default=Config.DEFAULT_MAX_BASE_AMOUNT,
                        help='Upper bound on the base-asset amount claimed, in minor units')
    parser.add_argument('--max-quote-amount', type=int, default=Config.DEFAULT_MAX_QUOTE_AMOUNT,
                        help='Upper bound on the quote-asset amount claimed, in minor units')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Fee claims and position split/transfer for DBC and DAMM v2 pools',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py claim-partner --pool <POOL_OR_BASE_MINT>
  python run.py claim-position --position <POSITION>
  python run.py positions --owner <WALLET>
  python run.py split --pool <POOL> --recipient <WALLET> --percent 50
  python run.py metrics --pool <POOL>
        """
    )
    parser.add_argument('--commitment', choices=['processed', 'confirmed', 'finalized'], default=None,
                        help=f'Settlement level to await (default: {Config.COMMITMENT})')
    parser.add_argument('--log-level', default=None, help='Override LOG_LEVEL')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('claim-partner', help='Claim partner (platform) trading fees of a DBC pool')
    p.add_argument('--pool', required=True, help='Pool address or base mint')
    _add_bounds_args(p)
    p.add_argument('--skip-validation', action='store_true',
                   help='Skip the partner check (the program still enforces it on-chain)')

    p = sub.add_parser('claim-creator', help='Claim creator trading fees of a DBC pool')
    p.add_argument('--pool', required=True, help='Pool address or base mint')
    _add_bounds_args(p)
    p.add_argument('--receiver', default=None)
    p.add_argument('--temp-wsol-account', default=None)

    p = sub.add_parser('claim-position', help='Claim LP fees of a DAMM v2 position')
    p.add_argument('--position', required=True)
    _add_bounds_args(p)
    p.add_argument('--receiver', default=None)
    p.add_argument('--temp-wsol-account', default=None)

    p = sub.add_parser('positions', help='List DAMM v2 positions of an owner')
    p.add_argument('--owner', default=None, help='Defaults to the operator wallet')

    p = sub.add_parser('split', help='Split a share of a position into a new one and send its NFT to a recipient')
    p.add_argument('--pool', required=True)
    p.add_argument('--recipient', required=True)
    p.add_argument('--percent', type=float, required=True, help='Share of liquidity to move, 0 < percent <= 100')

    p = sub.add_parser('metrics', help='Show fee metrics of a DBC pool')
    p.add_argument('--pool', required=True)

    p = sub.add_parser('pool', help='Show a DBC pool and its curve progress')
    p.add_argument('--pool', required=True, help='Pool address or base mint')

    p = sub.add_parser('partner-info', help='Show the partner (fee claimer) declared for a DBC pool')
    p.add_argument('--pool', required=True)

    p = sub.add_parser('migrated-pool', help='Derive the DAMM v2 pool a DBC pool migrates into')
    p.add_argument('--pool', required=True)

    p = sub.add_parser('quote-mint', help='Resolve a quote symbol (SOL, USDC, USDT) to its mint')
    p.add_argument('symbol')

    return parser


def run_command(args, service: FeeClaimerService):
    if args.command == 'claim-partner':
        signature = service.claim_partner_fee(
            args.pool, bounds=_bounds(args), skip_validation=args.skip_validation, commitment=args.commitment
        )
        print(Config.explorer_url(signature))
    elif args.command == 'claim-creator':
        signature = service.claim_creator_fee(
            args.pool, bounds=_bounds(args), receiver=args.receiver,
            temp_wsol_account=args.temp_wsol_account, commitment=args.commitment
        )
        print(Config.explorer_url(signature))
    elif args.command == 'claim-position':
        signature = service.claim_position_fee(
            args.position, bounds=_bounds(args), receiver=args.receiver,
            temp_wsol_account=args.temp_wsol_account, commitment=args.commitment
        )
        print(Config.explorer_url(signature))
    elif args.command == 'positions':
        print_positions(service.list_positions(args.owner or service.wallet.public_key))
    elif args.command == 'split':
        signature = service.split_position_to_recipient(
            args.pool, args.recipient, args.percent, commitment=args.commitment
        )
        print(Config.explorer_url(signature))
    elif args.command == 'metrics':
        print_metrics(args.pool, service.get_pool_fee_metrics(args.pool))
    elif args.command == 'pool':
        pool = service.get_pool(args.pool)
        progress = service.get_pool_curve_progress(pool.address)
        print(json.dumps({
            'address': pool.address,
            'baseMint': pool.base_mint,
            'quoteMint': pool.quote_mint,
            'config': pool.config,
            'creator': pool.creator,
            'curveProgress': progress,
        }, indent=2))
    elif args.command == 'partner-info':
        info = service.get_pool_partner_info(args.pool)
        print(json.dumps({'partnerAddress': info.partner_address, 'configAddress': info.config_address}, indent=2))
    elif args.command == 'migrated-pool':
        print(service.derive_damm_v2_pool_address(args.pool))


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    # Pure lookup, no chain access or wallet needed
    if args.command == 'quote-mint':
        try:
            print(get_quote_mint_address(args.symbol))
        except FeeClaimerError as e:
            logger.error(f'❌ {e}')
            sys.exit(1)
        return

    logger.info('=' * 100)
    logger.info(f'FEE CLAIMER - {args.command.upper()}')
    logger.info('=' * 100)

    try:
        wallet = KeypairWallet.from_env() if needs_wallet(args) else None
        if args.command in MUTATING_COMMANDS:
            require_operator(wallet)
        service = build_service(wallet, commitment=args.commitment)
        run_command(args, service)
    except FeeClaimerError as e:
        logger.error(f'❌ {args.command} failed: {e}')
        result = getattr(e, 'workflow_result', None)
        if result and result.steps:
            for step in result.steps:
                logger.error(f'   settled before failure: {step.name} -> {Config.explorer_url(step.signature)}')
        sys.exit(1)
    except (PermissionError, ValueError) as e:
        logger.error(f'❌ {e}')
        sys.exit(1)
    except Exception as e:
        logger.error(f'Error in main: {e}', exc_info=True)
        raise


if __name__ == '__main__':
    main()
