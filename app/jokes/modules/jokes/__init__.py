"""
Jokes module.

- `/jokes/new` is split into a loader, an action, a view and an error boundary
  (see `routes.py`), composed explicitly by the blueprint.
- Validation lives in `service.py` and is pure.
"""
