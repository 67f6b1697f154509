"""
recordkit Test Suite.

This package contains:
- unit/: Unit tests (one module per component)
- integration/: Record graph tests (nesting, cycles, parents, events)
"""
