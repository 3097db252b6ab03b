"""Test Fixtures Package.

Provides centralized fixtures for portal_context tests:
- http.py: ScriptedHandler for httpx.MockTransport, site-probe payload
- platform.py: StaticPlatformHandle fixtures
- context.py: ContextManager and ContextLogger fixtures

Fixtures are imported directly by conftest.py - no re-exports here.
This avoids circular imports between fixture modules.
"""
