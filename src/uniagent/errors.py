"""Broker error taxonomy.

Every error carries the HTTP status the facade answers with, so controllers
never decide status codes themselves.
"""

TRANSACTION_NOT_FOUND_MESSAGE = "Transaction not found or expired. Create a new one."


class BrokerError(Exception):
    """Base class for errors surfaced to broker callers."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InputError(BrokerError):
    """Request input rejected before any engine call."""

    status_code = 400


class MissingFieldError(InputError):
    """A required request field is absent or empty."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing {field}")


class UnknownChainError(InputError):
    """Chain name is not in the supported alias table."""

    def __init__(self, chain: str):
        self.chain = chain
        super().__init__(f"Unknown chain: {chain}")


class UnknownAssetError(InputError):
    """Asset symbol is not one of the primary assets."""

    def __init__(self, asset: str, supported: list[str]):
        self.asset = asset
        super().__init__(f"Unknown asset: {asset}. Use: {', '.join(supported)}")


class BuildFailedError(BrokerError):
    """The execution engine could not build an unsigned transaction."""

    def __init__(self, cause: str):
        self.cause = cause
        super().__init__(cause)


class TransactionNotFoundError(BrokerError):
    """Root hash is unknown, expired, or already claimed."""

    status_code = 404

    def __init__(self, root_hash: str = ""):
        self.root_hash = root_hash
        super().__init__(TRANSACTION_NOT_FOUND_MESSAGE)


class SubmissionFailedError(BrokerError):
    """The execution engine rejected a signed transaction."""

    def __init__(self, cause: str, root_hash: str = ""):
        self.cause = cause
        self.root_hash = root_hash
        super().__init__(cause)


class EngineError(Exception):
    """Raised by execution engine adapters.

    The broker converts it into BuildFailedError or SubmissionFailedError
    depending on the phase it happened in.
    """

    def __init__(self, message: str, http_status: int = 0):
        self.http_status = http_status
        super().__init__(message)
