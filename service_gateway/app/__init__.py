"""
API Gateway Service package.

The gateway fronts proxied backend services and enforces role based access
rules. The rules are declared globally and per backend service, and are
compiled at startup into an ordered, first-match-wins authorization policy.

Structure:
- app.main: FastAPI app, routes, and policy wiring.
- app.accessrules: Access rule model, policy builder and config loading.
"""
