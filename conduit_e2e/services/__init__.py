"""
Session bootstrap services.

Modules:
    session_store      - on-disk cache of credentials and storage state
    credential_source  - which identity a run authenticates as
    session_establisher - credentials -> validated storage state (API or UI)
    session_validator  - "is logged in" check against a snapshot
    session_bootstrap  - state machine tying the above together
    api_client         - thin Conduit REST client
    retry              - RetryPolicy and helpers
"""
