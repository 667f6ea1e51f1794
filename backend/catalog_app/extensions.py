# Overview: Flask extension holding the per-app catalog state, Google gateway and admin sessions.

from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from .state import CatalogState


@dataclass
class CatalogContext:
    state: CatalogState
    gateway: object
    sessions: object
    admin_password_hash: str


class CatalogExtension:
    """Registers a CatalogContext under app.extensions["catalog"]."""

    def init_app(self, app: Flask, gateway=None) -> None:
        from .services.auth_service import AdminSessionStore, resolve_admin_password_hash
        from .services.google_gateway import GoogleGateway

        if gateway is None:
            gateway = GoogleGateway(app.config["GOOGLE_CREDENTIALS_FILE"])

        app.extensions["catalog"] = CatalogContext(
            state=CatalogState(),
            gateway=gateway,
            sessions=AdminSessionStore(hours=app.config["ADMIN_SESSION_HOURS"]),
            admin_password_hash=resolve_admin_password_hash(app.config),
        )

    @property
    def context(self) -> CatalogContext:
        return current_app.extensions["catalog"]

    @property
    def state(self) -> CatalogState:
        return self.context.state

    @property
    def gateway(self):
        return self.context.gateway

    @property
    def sessions(self):
        return self.context.sessions


catalog = CatalogExtension()
