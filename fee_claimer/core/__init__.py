from .steps import TransactionRunner, tracked_workflow, workflow_step
from .claim_workflow import ClaimWorkflow
from .split_workflow import SplitTransferWorkflow
from .service import FeeClaimerService, get_quote_mint_address

__all__ = [
    'TransactionRunner',
    'tracked_workflow',
    'workflow_step',
    'ClaimWorkflow',
    'SplitTransferWorkflow',
    'FeeClaimerService',
    'get_quote_mint_address',
]
