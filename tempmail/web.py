"""Flask HTTP API exposing one temp mail client per browser session."""

import secrets
import threading
from collections import OrderedDict
from dataclasses import asdict
from typing import Callable, List, Optional

import structlog
from flask import Flask, jsonify, request, session

from .client import TempMailClient
from .config import LoggingConfig, WebConfig
from .errors import (
    ChallengeUnresolvedError,
    ChangeRejectedError,
    DeleteFailedError,
    NotStartedError,
    ProvisioningError,
    TempMailError,
    TransportError,
)
from .logging import setup_logging

logger = structlog.get_logger(__name__)

ERROR_STATUS = {
    NotStartedError: 409,
    ChangeRejectedError: 422,
    ProvisioningError: 502,
    DeleteFailedError: 502,
    TransportError: 502,
    ChallengeUnresolvedError: 503,
}


class ClientRegistry:
    """Live clients keyed by browser session, least recently used closed first.

    At most ``limit`` clients are kept. A client pushed out by the bound or
    replaced by a newer one for the same session is closed.
    """

    def __init__(self, limit: int):
        self._limit = limit
        self._clients: "OrderedDict[str, TempMailClient]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._clients)

    def get(self, client_id: Optional[str]) -> Optional[TempMailClient]:
        if not client_id:
            return None
        with self._lock:
            client = self._clients.get(client_id)
            if client is not None:
                self._clients.move_to_end(client_id)
        return client

    def put(self, client_id: str, client: TempMailClient) -> None:
        with self._lock:
            stale: List[TempMailClient] = []
            previous = self._clients.pop(client_id, None)
            if previous is not None:
                stale.append(previous)
            self._clients[client_id] = client
            while len(self._clients) > self._limit:
                _, oldest = self._clients.popitem(last=False)
                stale.append(oldest)
        for old in stale:
            old.close()
        if stale:
            logger.info("clients_closed", count=len(stale), live=len(self._clients))


def create_app(
    config: Optional[WebConfig] = None,
    client_factory: Callable[[], TempMailClient] = TempMailClient,
) -> Flask:
    config = config or WebConfig()
    app = Flask(__name__)
    app.secret_key = config.secret_key

    clients = ClientRegistry(config.max_clients)
    app.extensions["tempmail_clients"] = clients

    def get_mail_instance(operation: str) -> TempMailClient:
        """Returns the client bound to the caller's session."""
        client = clients.get(session.get("client_id"))
        if client is None:
            raise NotStartedError(operation)
        return client

    @app.errorhandler(TempMailError)
    def handle_error(error: TempMailError):
        status = next((code for kind, code in ERROR_STATUS.items() if isinstance(error, kind)), 500)
        return jsonify({"error": str(error), "kind": type(error).__name__}), status

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"})

    @app.route("/session", methods=["POST"])
    def start_session():
        mail = client_factory()
        try:
            email = mail.start_session()
        except Exception:
            mail.close()
            raise
        client_id = session.get("client_id") or secrets.token_urlsafe(16)
        clients.put(client_id, mail)
        session["client_id"] = client_id
        return jsonify({"email": email})

    @app.route("/domains", methods=["GET"])
    def domains():
        mail = get_mail_instance("available_domains")
        return jsonify({"domains": mail.available_domains()})

    @app.route("/change", methods=["POST"])
    def change():
        data = request.get_json(silent=True) or {}
        login = (data.get("login") or "").strip()
        domain = (data.get("domain") or "").strip()
        if not login or not domain:
            return jsonify({"error": "login and domain are required"}), 400
        mail = get_mail_instance("change")
        return jsonify({"email": mail.change(login, domain)})

    @app.route("/delete", methods=["POST"])
    def delete():
        mail = get_mail_instance("delete")
        return jsonify({"email": mail.delete()})

    @app.route("/inbox", methods=["GET"])
    def get_inbox():
        mail = get_mail_instance("refresh")
        inbox = mail.inbox.refresh()
        return jsonify({"email": mail.email, "messages": [asdict(m) for m in inbox]})

    @app.route("/read/<message_id>", methods=["GET"])
    def read_email(message_id):
        mail = get_mail_instance("read")
        return jsonify(asdict(mail.inbox.read(message_id)))

    return app


def main():
    config = WebConfig()
    setup_logging(LoggingConfig())
    create_app(config).run(host=config.host, port=config.port, debug=config.debug)


if __name__ == "__main__":
    main()
