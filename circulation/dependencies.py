"""FastAPI dependency providers."""
from fastapi import Request

from circulation.engine import LendingEngine


def get_engine(request: Request) -> LendingEngine:
    """Dependency provider for the engine attached to the running app."""
    return request.app.state.engine
