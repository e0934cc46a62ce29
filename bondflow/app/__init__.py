"""Application composition layer for the command-line runtime.

The controller wires adapters, use cases and view-models; ``main`` exposes
them as CLI subcommands without placing business logic there.
"""
