from sqlalchemy.orm import Session

from scoreboard.client.cache import CACHE_KEY, CachedState, LocalCache
from scoreboard.models import GameState


def _state(a=1):
    return GameState(started=True, team_names={'teamA': 'Lions', 'teamB': 'Tigers'},
                     scores={'teamA': a, 'teamB': 0})


def test_miss_on_empty(cache):
    assert cache.get() is None
    assert cache.revision() == 0


def test_set_get_clear(cache):
    cache.set(_state())
    assert cache.get() == _state()
    cache.clear()
    assert cache.get() is None


def test_survives_restart(tmp_path):
    path = str(tmp_path / 'nested' / 'cache.sqlite3')
    first = LocalCache(path)
    first.set(_state(7))
    first.close()
    second = LocalCache(path)
    assert second.get() == _state(7)
    second.close()


def test_corrupt_entry_is_a_miss(cache):
    cache.set(_state())
    with Session(cache._engine) as session:
        session.get(CachedState, CACHE_KEY).payload = '{"scores": '
        session.commit()
    assert cache.get() is None


def test_wrong_shape_is_a_miss(cache):
    cache.set(_state())
    with Session(cache._engine) as session:
        session.get(CachedState, CACHE_KEY).payload = '{"scores": {"teamA": 1}}'
        session.commit()
    assert cache.get() is None


def test_revision_tracks_writers(tmp_path):
    path = str(tmp_path / 'cache.sqlite3')
    mine, theirs = LocalCache(path), LocalCache(path)
    mine.set(_state(1))
    assert mine.revision() == mine.seen_revision == 1
    theirs.set(_state(2))
    assert mine.revision() == 2
    assert mine.seen_revision == 1
    assert mine.get() == _state(2)
    assert mine.seen_revision == 2
    mine.close()
    theirs.close()


def test_listeners_notified(cache):
    seen = []
    unsubscribe = cache.subscribe(seen.append)
    cache.set(_state())
    cache.clear()
    unsubscribe()
    cache.set(_state(2))
    assert seen == [_state(), None]


def test_in_memory_cache_shared_across_threads():
    import threading

    cache = LocalCache(':memory:')
    cache.set(_state(4))
    result = []
    worker = threading.Thread(target=lambda: result.append(cache.get()))
    worker.start()
    worker.join()
    assert result == [_state(4)]
