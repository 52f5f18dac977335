"""
OpenServ Agent Server Package.

This package contains the HTTP surface the OpenServ platform calls into.

Subpackages:
    api: FastAPI route definitions (health, root action route, tool route).
    core: Environment-backed settings.
    exception_handlers: Application-wide exception handlers.
    schemas: Pydantic schemas for request/response bodies.
"""
