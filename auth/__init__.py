"""auth/ -- Credential and session core for AuthGate.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/. api/ imports from auth/, not the other way
around. auth/dependencies.py and auth/cookies.py are the only modules that
know about FastAPI request/response objects.
"""
