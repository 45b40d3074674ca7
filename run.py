import logging
import socket

from scoreboard import create_app, socketio

app = create_app()


def lan_addresses():
    """Non-loopback IPv4 addresses this host is reachable on."""
    try:
        infos = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
    except OSError:
        return []
    return sorted({info[4][0] for info in infos if not info[4][0].startswith('127.')})


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    host, port = app.config['HOST'], app.config['PORT']
    app.logger.info(f"Relay running on all interfaces at port {port}")
    for address in lan_addresses():
        app.logger.info(f"  http://{address}:{port}")
    socketio.run(app, host=host, port=port, allow_unsafe_werkzeug=True)
