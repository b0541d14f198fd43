"""Test suite for the MongoDB policy store.

Test structure:
- unit/: Unit tests against an in-memory fake collection (tests/utils/)
- integration/: Round trips against a real MongoDB, skipped when unreachable
"""
