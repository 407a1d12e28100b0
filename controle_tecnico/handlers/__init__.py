"""REST handlers, one route table per resource."""
from . import apps, audit_logs, auth, domains, health, hostings, secrets

ROUTE_TABLES = [
    health.routes,
    auth.routes,
    apps.routes,
    hostings.routes,
    domains.routes,
    secrets.routes,
    audit_logs.routes,
]

__all__ = ["ROUTE_TABLES"]
