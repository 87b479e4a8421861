"""
Proof Relay Service
===================

HTTP facade that signs exchange requests, asks the zkFetch attestor to
prove their responses, and caches trade proofs by request fingerprint.

Endpoints:
    - GET  /                        recent trades page
    - POST /generateUSDMTradeProof  proof that an order belongs to the caller
    - POST /generateAssetProof      proof of a free asset balance
    - POST /debugproxy              proof of the relay's public IP
    - GET  /health                  service health
"""
