"""Transaction builder adapter.

Turns a resolved intent into an unsigned transaction by dispatching to the
execution engine. Every engine failure surfaces as BuildFailedError.
"""

import logging

import httpx

from uniagent.engine.base import ExecutionEngine
from uniagent.errors import BuildFailedError, EngineError
from uniagent.models import Intent, OperationKind, UnsignedTransaction

logger = logging.getLogger(__name__)


class TransactionBuilder:
    """Builds unsigned transactions through an execution engine."""

    def __init__(self, engine: ExecutionEngine):
        self.engine = engine

    async def build(self, intent: Intent) -> UnsignedTransaction:
        """Build the unsigned transaction for an intent.

        Args:
            intent: Fully resolved client request

        Returns:
            Engine-built transaction, not yet stored

        Raises:
            BuildFailedError: If the engine rejects the intent or is unreachable
        """
        handlers = {
            OperationKind.BUY: self.engine.build_buy,
            OperationKind.SELL: self.engine.build_sell,
            OperationKind.CONVERT: self.engine.build_convert,
            OperationKind.TRANSFER: self.engine.build_transfer,
        }
        handler = handlers[intent.operation]

        try:
            transaction = await handler(intent)
        except EngineError as e:
            logger.warning(f"{intent.operation.value} build rejected by {self.engine.name}: {e}")
            raise BuildFailedError(str(e)) from e
        except httpx.HTTPError as e:
            logger.error(f"{intent.operation.value} build failed, engine unreachable: {e}")
            raise BuildFailedError(f"Execution engine unreachable: {e}") from e
        except Exception as e:
            logger.exception(f"{intent.operation.value} build failed unexpectedly in {self.engine.name}")
            raise BuildFailedError(f"Execution engine error: {e}") from e

        logger.info(
            f"Built {intent.operation.value} for {intent.owner_address[:10]}... "
            f"on chain {intent.chain_id}: {transaction.root_hash[:10]}... "
            f"({transaction.step_count} step(s))"
        )
        return transaction
