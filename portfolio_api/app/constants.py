"""API-level constants shared across modules."""
from __future__ import annotations


class DeploymentMode:
    AUTO = "auto"
    PERSISTENT = "persistent"
    SERVERLESS = "serverless"


# Paths served without a database connection, even in serverless mode.
DATABASE_FREE_PATHS = ("/health/live", "/api/test")

DATABASE_UNAVAILABLE_MESSAGE = "Database unavailable"
