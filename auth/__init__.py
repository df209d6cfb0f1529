"""auth/ -- Authentication package for the ISRS auth service.

Layer rule: auth/ imports from core/, audit/, stdlib and third-party libraries.
It does NOT import from api/. api/ imports from auth/, not the other way around.
"""
