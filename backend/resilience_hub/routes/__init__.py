# Routes package init
"""
ResilienceHub Backend — API Routes Package
==========================================

What:  HTTP route handlers, one module per resource family.

Route modules:
    - auth.py:                /api/auth/*            register, login, logout, me
    - users.py:               /api/users[/...]       user management
    - emotions.py:            emotion records + stats
    - thoughts.py:            thought records + ratings
    - library.py:             protective factors, coping strategies, their usage
    - goals.py:               goals, milestones, goal status feedback
    - actions.py:             behavioural activation / exposure actions
    - journal.py:             journal entries + comments
    - resources.py:           resource library + assignments
    - subscription_plans.py:  subscription plans
    - health.py:              GET /health

Design Principle:
    Routes stay thin. Authentication, role gates and the access-scope
    decision are declared as dependencies in each signature; anything beyond
    a single repository call lives in `services/`.
"""
