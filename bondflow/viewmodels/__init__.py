"""ViewModel package for presentation state and command surfaces.

Call context:
    ``bondflow/app/controller.py`` and ``bondflow/app/main.py`` build these
    viewmodels and bind printing or UI callbacks to their state changes.

Dependencies:
    Modules here depend on domain types and use-case objects only. Ledger
    adapters and persistence stay in the adapter and app layers.
"""
