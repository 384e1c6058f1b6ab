import os
from dotenv import load_dotenv
load_dotenv()


class Config:
    # Solana Configuration
    SOLANA_HTTP_RPC_URL = os.getenv('SOLANA_HTTP_RPC_URL')
    RPC_TIMEOUT_SECONDS = float(os.getenv('RPC_TIMEOUT_SECONDS', '30'))
    # Upper bound on concurrent read fan-out (position enrichment)
    RPC_MAX_WORKERS = int(os.getenv('RPC_MAX_WORKERS', '8'))

    # Settlement
    COMMITMENT = os.getenv('COMMITMENT', 'confirmed')
    CONFIRM_TIMEOUT_SECONDS = float(os.getenv('CONFIRM_TIMEOUT_SECONDS', '60'))
    CONFIRM_POLL_INTERVAL_SECONDS = float(os.getenv('CONFIRM_POLL_INTERVAL_SECONDS', '1'))

    # Bounded polls of the split workflow
    INDEXING_SETTLE_DELAY_SECONDS = float(os.getenv('INDEXING_SETTLE_DELAY_SECONDS', '2'))
    INDEXING_TIMEOUT_SECONDS = float(os.getenv('INDEXING_TIMEOUT_SECONDS', '30'))
    INDEXING_POLL_INTERVAL_SECONDS = float(os.getenv('INDEXING_POLL_INTERVAL_SECONDS', '2'))
    ACCOUNT_CREATION_TIMEOUT_SECONDS = float(os.getenv('ACCOUNT_CREATION_TIMEOUT_SECONDS', '30'))
    ACCOUNT_POLL_INTERVAL_SECONDS = float(os.getenv('ACCOUNT_POLL_INTERVAL_SECONDS', '2'))

    # Claim bounds: quote default is 1 SOL (9 decimals)
    DEFAULT_MAX_BASE_AMOUNT = int(os.getenv('DEFAULT_MAX_BASE_AMOUNT', '0'))
    DEFAULT_MAX_QUOTE_AMOUNT = int(os.getenv('DEFAULT_MAX_QUOTE_AMOUNT', '1000000000'))

    # Operator wallet (base58 encoded 64-byte secret key)
    PRIVATE_KEY = os.getenv('PRIVATE_KEY')

    # Comma separated "address" or "address:role" entries
    AUTHORIZED_WALLETS = os.getenv(
        'AUTHORIZED_WALLETS',
        '7xtnVLHTkLcSXHvfbFFyv1FdTNov3LfP4yFxwYbXotj1,FG75GTSYMimybJUBEcu6LkcNqm7fkga1iMp3v4nKnDQS'
    )

    # Protocol SDK adapters, as "package.module:ClassName"
    BONDING_CURVE_SDK = os.getenv('BONDING_CURVE_SDK')
    CP_AMM_SDK = os.getenv('CP_AMM_SDK')

    EXPLORER_TX_URL = os.getenv('EXPLORER_TX_URL', 'https://solscan.io/tx/{signature}?cluster=mainnet')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Constants
    STABLECOINS = {'USDC': 'EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v', 'USDT': 'Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB'}
    SOL_ADDRESS = 'So11111111111111111111111111111111111111112'
    QUOTE_MINTS = {'SOL': SOL_ADDRESS, **STABLECOINS}

    # DAMM v2 config used by a graduated bonding-curve pool, keyed by migration fee option
    DAMM_V2_MIGRATION_FEE_ADDRESS = {
        0: '7F6dnUcRuyM2TwR8myT1dYypFXpPSxqwKNSFNkxyNESd',
        1: '2nHK1kju6XjphBLbNxpM5XRGFj7p9U8vvNzyZiha1z6k',
        2: 'Hv8Lmzmnju6m7kcokVKvwqz7QPmdX9XfKjJsXz8RXcjp',
        3: '2c4cYd4reUYVRAB9kUUkrq55VPyy2FNQ3FDL4o12JXmq',
        4: 'AkmQWebAwFvWk55wBoCr5D62C6VVDTzi84NJuD9H7cFD',
        5: 'DbCRBj8McvPYHJG1ukj8RE15h2dCNUdTAESG49XpQ44u',
        6: 'A8gMrEPJkacWkcb3DGwtJwTe16HktSEfvwtuDh2MCtck',
    }

    @classmethod
    def validate(cls):
        required_fields = ['SOLANA_HTTP_RPC_URL']
        missing = []
        for field in required_fields:
            if not getattr(cls, field):
                missing.append(field)
        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")
        if cls.COMMITMENT not in ('processed', 'confirmed', 'finalized'):
            raise ValueError(f'Unsupported COMMITMENT: {cls.COMMITMENT}')
        return True

    @classmethod
    def explorer_url(cls, signature: str) -> str:
        return cls.EXPLORER_TX_URL.format(signature=signature)
