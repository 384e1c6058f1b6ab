import logging
from contextlib import contextmanager
from typing import Sequence

from ..config import Config
from ..errors import FeeClaimerError, SubmissionError, ValidationError
from ..ledger import COMMITMENT_LEVELS
from ..models import WorkflowResult

logger = logging.getLogger(__name__)


def validate_commitment(commitment: str = None, default: str = None) -> str:
    """Resolve the assurance level to await; unknown levels fail before any network call."""
    commitment = commitment or default or Config.COMMITMENT
    if commitment not in COMMITMENT_LEVELS:
        raise ValidationError(
            f"Unsupported assurance level {commitment!r}; expected one of {', '.join(COMMITMENT_LEVELS)}"
        )
    return commitment


@contextmanager
def workflow_step(name: str):
    """
    Attach the step name to failures raised inside the block. Errors from
    collaborators are re-raised as SubmissionError with the cause chained.
    """
    try:
        yield
    except FeeClaimerError as e:
        if e.step is None:
            e.step = name
        raise
    except Exception as e:
        raise SubmissionError(f'{name} failed: {e}', step=name) from e


@contextmanager
def tracked_workflow(result: WorkflowResult):
    """Record the terminal failure on the result and hand the result to the caller via the error."""
    try:
        yield result
    except FeeClaimerError as e:
        result.error = e
        e.workflow_result = result
        logger.error(f'❌ {result.workflow} failed: {e}')
        if result.steps:
            settled = ', '.join(f'{s.name}={s.signature}' for s in result.steps)
            logger.error(f'   Already settled (not rolled back): {settled}')
        raise


class TransactionRunner:
    """Stamp, sign, submit and await settlement of one transaction."""

    def __init__(self, ledger, commitment: str = None):
        self.ledger = ledger
        self.commitment = commitment or Config.COMMITMENT

    def submit(self, draft, wallet, payer: str, step: str, extra_signers: Sequence = (), commitment: str = None) -> str:
        commitment = validate_commitment(commitment, self.commitment)

        with workflow_step(f'{step}/stamp'):
            blockhash = self.ledger.get_latest_blockhash(commitment)
            draft.stamp(blockhash, payer)

        with workflow_step(f'{step}/sign'):
            signed = wallet.sign(draft)
            if signed is None:
                raise SubmissionError('Wallet returned no signed transaction')
            # Wallet signs first, generated keypairs co-sign afterwards
            if extra_signers:
                signed.partial_sign(list(extra_signers))

        with workflow_step(f'{step}/submit'):
            signature = self.ledger.send_and_confirm(signed.serialize(), commitment)

        logger.info(f'   ✅ {step} settled ({commitment}): {Config.explorer_url(signature)}')
        return signature
