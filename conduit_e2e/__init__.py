"""
Conduit E2E

Playwright page objects, an API client and a cached session bootstrap for
end-to-end tests against the Conduit demo application.
"""

__version__ = "1.0.0"
