"""API routers for the CITT portal."""

from . import projects
from . import funding
from . import ip_records
from . import notifications
from . import audit
from . import roles
from . import health

__all__ = [
    "projects",
    "funding",
    "ip_records",
    "notifications",
    "audit",
    "roles",
    "health",
]
