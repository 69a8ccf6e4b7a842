"""API Routers package

This package contains all API route handlers.
Routers are organized by ingestion channel.
"""

from . import discord_router, games_router, reports_router

__all__ = [
    "discord_router",
    "games_router",
    "reports_router",
]
