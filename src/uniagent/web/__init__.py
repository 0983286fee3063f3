"""Web boundary layer for the non-custodial broker.

SECURITY PRINCIPLES:
1. Engine credentials never appear in a response.
2. Unsigned transactions stay server-side; clients only see the root hash
   and a fee preview.
3. No private key is ever accepted or held. Signatures arrive ready-made
   and are passed through to the engine untouched.
"""

__all__ = [
    "contracts",
    "controllers",
]
