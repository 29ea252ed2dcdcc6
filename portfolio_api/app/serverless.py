"""
Serverless entry point: the API wrapped for Vercel / AWS Lambda.

The platform may recycle the process at any time and does not run ASGI
lifespan events, so the app is built in serverless mode (per-request
connection through the shared cache) and Mangum runs with lifespan="off".
"""
from mangum import Mangum

from portfolio_api.app.config.settings import Settings
from portfolio_api.app.constants import DeploymentMode
from portfolio_api.app.main import create_app

app = create_app(Settings(deployment_mode=DeploymentMode.SERVERLESS))

handler = Mangum(app, lifespan="off")

__all__ = ["app", "handler"]
