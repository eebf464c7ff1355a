"""bambootray terminal monitor: presentation layer for the engine's output ports.

Modules
-------
renderer
    ``TrayRenderer`` turns a ``Snapshot`` and ``AggregateState`` into Rich
    renderables for terminal display, including continuous ``Rich.Live``
    mode via ``bambootray watch``.
"""
