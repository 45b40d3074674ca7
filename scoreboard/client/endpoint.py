from urllib.parse import parse_qs


def endpoint_from_query(query: str, default: str) -> str:
    """Relay URL to use, honoring a ``?server=<host>`` override.

    ``query`` may be a full page URL or a bare query string. The override is
    not validated beyond trimming and adding ``http://`` when no scheme is
    given.
    """
    if not query:
        return default
    if '?' in query:
        query = query.split('?', 1)[1]
    query = query.split('#', 1)[0]
    values = parse_qs(query).get('server')
    server = values[0].strip() if values else ''
    if not server:
        return default
    if '://' not in server:
        server = f'http://{server}'
    return server
