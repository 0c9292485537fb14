"""
Pneuma - node interaction layer for nomisma.

- tx:      transaction codec, signing and RPC option canonicalization
- rpc:     JSON-RPC over HTTP (httpx) and provider selection by URL
- ws:      JSON-RPC over a persistent WebSocket (websockets)
- parse:   hex quantity parsing of node responses
- pending: confirmation polling for submitted transactions
- client:  typed wrappers over the ``cfx_*`` methods

Uses httpx + websockets + eth-keys instead of the heavyweight web3.py.
"""
