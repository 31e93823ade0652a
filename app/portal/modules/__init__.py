"""
Feature modules live under this package.

Each module owns its models, service functions and blueprints, while reusing
platform primitives (auth, RBAC, audit, DB session).
"""
