"""
Unit tests for failsafe.

Test individual components in isolation:
- Outcome algebra (combine table, fold)
- Reactions (retry budget edge cases)
- Handler and chain link records (normalization, matching)
- Resolution engine (selection order, chain fold, short-circuit)
- Retry loop (attempt counting, success/finally callbacks, propagation)
- Fluent builder
"""
