"""Tessera - authentication and token lifecycle service.

Layers:
    tessera/
    ├── domain/           # User aggregate, lockout policy, audit log
    ├── application/      # AuthenticationService and maintenance
    ├── infrastructure/   # SQLAlchemy persistence
    └── presentation/     # FastAPI app and typer CLI
"""

__version__ = "0.1.0"
