"""
Theurgy - Command implementations for the nomisma CLI.

Each module corresponds to top-level CLI commands:
- genesis:  Create a local key (~/.nomisma/.env)
- keystore: seal / unseal a key into a password-protected JSON file
- send:     Sign, submit and optionally follow a transfer
- divine:   Show the stage a transaction has reached
"""
