"""
Auth package for the Buch catalog backend.

- app.auth_service: login, bearer token validation and role checks.
- app.tokens: key material and the signed token codec.
- app.users: read-only credential store.
- app.routes: login route and request dependencies for other services.
- app.main: standalone application exposing the login route.

Module import must not perform IO; key files and the user document are
read by the factories in app.main.
"""
