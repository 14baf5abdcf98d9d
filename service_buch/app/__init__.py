"""
Buch catalog service package.

- app.model: catalog entry model and field validation.
- app.persistence: store adapters (MongoDB and in-memory).
- app.notify: best-effort notification of new entries.
- app.service: create/update/remove with optimistic concurrency.
- app.main: HTTP application.
"""
