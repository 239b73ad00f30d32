from .app import configure_app, create_app
from .auth import AuthGate, Route

__all__ = ["AuthGate", "Route", "configure_app", "create_app"]
