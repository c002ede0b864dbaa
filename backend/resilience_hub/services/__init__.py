# Services package init
"""
ResilienceHub Backend — Services Layer
======================================

What:  Business logic sitting between routes (HTTP) and repositories (persistence).
How:   Services take an AsyncSession or repositories, apply the rules, and
       raise domain exceptions that `main.py` maps to HTTP responses.

Service Inventory:
    - SessionStore: Session rows (create, lookup, delete, purge expired)
    - SessionCache: In-process token → principal cache with TTL and sweeper
    - Authenticator: Session token → AuthContext, failure messages, cookie clearing
    - AccessResolver: Who may read or create records for which user
    - UserService: Registration, login, profile, therapist and plan assignment, deletion
    - RecordService: Cascading deletes and the emotion/thought statistics
    - passwords: passlib hashing and verification
"""
