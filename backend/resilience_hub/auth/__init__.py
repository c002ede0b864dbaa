"""
ResilienceHub Backend — Authentication & Authorization Package
==============================================================

What:  The request-facing half of the access-control layer.

Modules:
    - context.py:       Principal / SessionView / AuthContext value types
    - cookies.py:       Session cookie issue / clear policy
    - gates.py:         Role gates (admin, therapist, client-or-admin)
    - dependencies.py:  FastAPI dependencies wiring the authenticator, gates
                        and access-scope resolver into routes

Request pipeline:
    cookie → get_auth_context (Authenticator) → role gate(s) → access scope → handler

Each stage is a dependency that returns a typed value or raises; nothing is
attached to `request.state` along the way.
"""
