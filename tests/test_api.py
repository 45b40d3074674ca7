from doubles import game_data

DEFAULT = {
    'gameStarted': False,
    'teamNames': {'teamA': '', 'teamB': ''},
    'scores': {'teamA': 0, 'teamB': 0},
    'winner': None,
}

STARTED = {
    'gameStarted': True,
    'teamNames': {'teamA': 'Lions', 'teamB': 'Tigers'},
    'scores': {'teamA': 3, 'teamB': 1},
    'winner': None,
}


def test_get_returns_default_state(client):
    res = client.get('/api/game')
    assert res.status_code == 200
    assert res.get_json() == DEFAULT


def test_post_then_get(client):
    res = client.post('/api/game', json=STARTED)
    assert res.status_code == 200
    assert res.get_json() == {'success': True}
    assert client.get('/api/game').get_json() == STARTED


def test_get_has_no_side_effects(client, sio_client):
    sio_client.get_received()  # flush the bootstrap
    client.get('/api/game')
    client.get('/api/game')
    assert game_data(sio_client.get_received()) == []


def test_post_broadcasts_to_sockets(client, sio_client):
    sio_client.get_received()
    client.post('/api/game', json=STARTED)
    assert game_data(sio_client.get_received()) == [STARTED]


def test_post_rejects_malformed_body(client):
    res = client.post('/api/game', json={'scores': {'teamA': 1}})
    assert res.status_code == 400
    body = res.get_json()
    assert body['success'] is False
    assert 'missing keys' in body['error']
    # Nothing was stored
    assert client.get('/api/game').get_json() == DEFAULT


def test_post_rejects_non_json(client):
    res = client.post('/api/game', data='not json', content_type='text/plain')
    assert res.status_code == 400


def test_post_rejects_string_scores(client):
    bad = dict(STARTED, scores={'teamA': '3', 'teamB': 1})
    assert client.post('/api/game', json=bad).status_code == 400


def test_store_accepts_domain_invalid_values(client):
    # Domain rules are enforced at the edges, the relay keeps whatever it is given
    odd = dict(DEFAULT, scores={'teamA': -2, 'teamB': 0}, winner='Lions')
    assert client.post('/api/game', json=odd).status_code == 200
    assert client.get('/api/game').get_json() == odd


def test_index_reports_observers(client, sio_client):
    body = client.get('/').get_json()
    assert body['observers'] == 1
