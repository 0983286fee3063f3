"""UniAgent: non-custodial two-phase broker for cross-chain trades."""

__version__ = "0.1.0"
