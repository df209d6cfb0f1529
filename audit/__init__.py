"""audit/ -- Append-only per-user activity log.

Layer rule: audit/ imports from core/ and third-party libraries only.
It does NOT import from api/ or auth/. auth/service.py uses audit/, not the
other way around.
"""
