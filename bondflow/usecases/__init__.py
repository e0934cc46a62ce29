"""Use-case layer for the bond subscription workflows.

Each module coordinates domain objects and the ledger port without touching
transport details, keeping the presentation layer free of contract calls.
"""
