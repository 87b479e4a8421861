"""
Proof Relay Routes
==================

API route handlers for the proof relay service.
"""

from services.proof_relay.routes import proofs, trades


__all__ = ["proofs", "trades"]
