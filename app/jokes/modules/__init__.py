"""
Feature modules live under this package.

Each module owns its routes, models and service functions, and reuses the
platform pieces (session, audit, DB session) from `app.jokes`.
"""
