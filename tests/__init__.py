"""
Test suite for pooled trading vault

Contains:
- tests/conftest.py : VaultHarness поверх memory gateways, fixtures spot / perpetual
- tests/unit/       : Unit tests по модулям и сквозные сценарии vault
"""
