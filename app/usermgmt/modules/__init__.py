"""
Feature modules live under this package.

Each module owns its routes and templates and talks to the platform only through
the shared client (app.usermgmt.platform).
"""
