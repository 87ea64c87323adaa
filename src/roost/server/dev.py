"""Server launcher.

Starts a pounce ASGI server with the live roost App object. pounce is
an optional dependency (``pip install roost[server]``); any other ASGI
server can host the app instead.
"""

from roost.errors import ConfigurationError


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """Start a pounce server with the given roost App.

    Runs one worker. The SSR cache lives in process memory and is not
    shared between worker processes.

    Args:
        app: ASGI callable (roost App instance).
        host: Bind host address.
        port: Bind port number.
        reload: Enable auto-reload on file changes.
        log_level: Server log level.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = (
            "app.run() requires pounce. Install it with: pip install roost[server], "
            "or serve the app with any ASGI server."
        )
        raise ConfigurationError(msg) from exc

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        log_level=log_level,
    )
    Server(config, app).run()
