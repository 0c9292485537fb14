"""
Sigil - key material for nomisma.

- eth:      secp256k1 signing, sender recovery and local key persistence
- keystore: password-protected private key records
"""
