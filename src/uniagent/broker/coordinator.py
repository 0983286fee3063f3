"""Sign-and-submit coordinator.

Lifecycle of a pending transaction:

    Built --submit--> Submitting --engine ok--> Confirmed
                                 --engine err-> Failed
    Built --ttl-----> Expired

The entry is claimed out of the store before the engine is called and is
never put back, so a root hash reaches the engine at most once.
"""

import logging
from typing import Optional

import httpx

from uniagent.broker.store import PendingTransactionStore
from uniagent.config import Settings, get_settings
from uniagent.engine.base import ExecutionEngine
from uniagent.errors import (
    EngineError,
    MissingFieldError,
    SubmissionFailedError,
    TransactionNotFoundError,
)
from uniagent.models import Receipt

logger = logging.getLogger(__name__)


class SubmitCoordinator:
    """Pairs a client signature with its pending transaction and submits it."""

    def __init__(
        self,
        store: PendingTransactionStore,
        engine: ExecutionEngine,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.engine = engine
        self.settings = settings or get_settings()

    async def submit(self, root_hash: Optional[str], signature: Optional[str]) -> Receipt:
        """Submit the signed transaction for root_hash.

        Args:
            root_hash: Root hash returned by a create call
            signature: Owner's signature over the root hash, passed through as is

        Returns:
            Receipt with transaction ID and explorer link

        Raises:
            MissingFieldError: If root_hash or signature is empty
            TransactionNotFoundError: If the hash is unknown, expired, or already submitted
            SubmissionFailedError: If the engine rejects the signed transaction
        """
        if not root_hash:
            raise MissingFieldError("rootHash")
        if not signature:
            raise MissingFieldError("signature")

        entry = await self.store.take(root_hash)
        if entry is None:
            logger.info(f"Submit for unknown or expired root hash {root_hash[:10]}...")
            raise TransactionNotFoundError(root_hash)

        try:
            result = await self.engine.send(entry.transaction, signature, entry.context)
        except EngineError as e:
            logger.warning(f"Submission of {root_hash[:10]}... rejected: {e}")
            raise SubmissionFailedError(str(e), root_hash=root_hash) from e
        except httpx.HTTPError as e:
            logger.error(f"Submission of {root_hash[:10]}... failed, engine unreachable: {e}")
            raise SubmissionFailedError(f"Execution engine unreachable: {e}", root_hash=root_hash) from e
        except Exception as e:
            logger.exception(f"Submission of {root_hash[:10]}... failed unexpectedly")
            raise SubmissionFailedError(f"Execution engine error: {e}", root_hash=root_hash) from e

        logger.info(f"Submitted {root_hash[:10]}... as transaction {result.transaction_id}")
        return Receipt(
            transaction_id=result.transaction_id,
            explorer_url=self.settings.explorer_url(result.transaction_id),
            fees=result.fees,
        )
