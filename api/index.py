"""
Vercel entry point: exposes the serverless-mode ASGI app and its Mangum handler.
"""
from portfolio_api.app.serverless import app, handler

__all__ = ["app", "handler"]
