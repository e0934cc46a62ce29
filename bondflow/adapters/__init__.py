"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports (the web3 ledger
    gateway, local settings storage, and the in-memory ledger double) used by
    use cases.

Dependencies:
    Individual submodules depend on ``web3``, ``requests``, filesystem APIs,
    and domain protocol definitions.

Call context:
    Imported by app composition modules (for runtime wiring) and by tests (for
    mocks and transport-level behavior verification).
"""
