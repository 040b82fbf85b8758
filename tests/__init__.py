"""
Conduit E2E Test Suite

Test categories:
- test_session_*.py - session cache, establishment and bootstrap state machine
- test_credential_source.py - credential policy and signup retries
- test_api_client.py - Conduit REST client
- e2e/ - browser tests against the live application (opt-in)
"""
