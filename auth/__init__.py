"""auth/ -- Credential store, token issuer, auth flow, and session guard.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/. api/ imports from auth/, not the other way around.
"""
