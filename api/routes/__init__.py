"""
Route registry: every router the application mounts, by name.
"""

from __future__ import annotations

from fastapi import APIRouter

from api.routes import main, organisations, permissions, projects, sessions, users

ROUTES: dict[str, APIRouter] = {
    "main": main.router,
    "sessions": sessions.router,
    "users": users.router,
    "organisations": organisations.router,
    "projects": projects.router,
    "permissions": permissions.router,
}
