"""Session store tests.

Covers token shape, resolve/revoke/contains, concurrent issuance, and the
optional TTL with a fake clock.
"""

import asyncio
import string
from concurrent.futures import ThreadPoolExecutor

from linkshelf.auth.sessions import (
    TOKEN_ALPHABET,
    SessionStore,
    SessionSweeper,
    generate_token,
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_alphabet_is_62_alphanumerics():
    assert len(TOKEN_ALPHABET) == 62
    assert set(TOKEN_ALPHABET) == set(string.ascii_letters + string.digits)


def test_token_is_32_alphanumeric_chars():
    token = generate_token()
    assert len(token) == 32
    assert all(c in TOKEN_ALPHABET for c in token)


def test_create_then_resolve():
    store = SessionStore()
    token = store.create_session("alice")
    assert len(token) == 32
    assert store.resolve(token) == "alice"
    assert store.contains(token)


def test_resolve_unknown_token():
    store = SessionStore()
    assert store.resolve("never-issued") is None
    assert not store.contains("never-issued")


def test_revoke_twice():
    """First revoke returns the username, second returns nothing."""
    store = SessionStore()
    token = store.create_session("bob")

    assert store.revoke(token) == "bob"
    assert store.revoke(token) is None
    assert store.resolve(token) is None
    assert not store.contains(token)


def test_sessions_are_independent():
    store = SessionStore()
    t1 = store.create_session("alice")
    t2 = store.create_session("alice")
    assert t1 != t2

    store.revoke(t1)
    assert store.resolve(t2) == "alice"
    assert len(store) == 1


def test_concurrent_issuance_yields_distinct_tokens():
    store = SessionStore()
    usernames = [f"user-{i}" for i in range(2000)]

    with ThreadPoolExecutor(max_workers=32) as pool:
        tokens = list(pool.map(store.create_session, usernames))

    assert len(set(tokens)) == len(usernames)
    assert len(store) == len(usernames)
    for token, username in zip(tokens, usernames):
        assert store.resolve(token) == username


def test_concurrent_revoke_returns_username_once():
    store = SessionStore()
    token = store.create_session("carol")

    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(lambda _: store.revoke(token), range(64)))

    assert results.count("carol") == 1
    assert results.count(None) == 63


def test_no_ttl_means_no_expiry():
    clock = FakeClock()
    store = SessionStore(clock=clock)
    token = store.create_session("dave")

    clock.now += 10 * 365 * 24 * 3600
    assert store.resolve(token) == "dave"
    assert store.sweep() == 0


def test_ttl_expires_sessions():
    clock = FakeClock()
    store = SessionStore(ttl_seconds=60, clock=clock)
    token = store.create_session("erin")

    clock.now += 59
    assert store.resolve(token) == "erin"

    clock.now += 1
    assert not store.contains(token)
    assert store.resolve(token) is None
    assert len(store) == 0


def test_revoke_expired_session_returns_nothing():
    clock = FakeClock()
    store = SessionStore(ttl_seconds=10, clock=clock)
    token = store.create_session("frank")

    clock.now += 11
    assert store.revoke(token) is None


def test_sweep_removes_only_expired():
    clock = FakeClock()
    store = SessionStore(ttl_seconds=100, clock=clock)
    old = store.create_session("old")
    clock.now += 50
    fresh = store.create_session("fresh")

    clock.now += 60
    assert store.sweep() == 1
    assert store.resolve(old) is None
    assert store.resolve(fresh) == "fresh"


def test_repr_reports_count():
    store = SessionStore()
    store.create_session("x")
    assert repr(store) == "SessionStore with 1 sessions"


async def test_sweeper_purges_until_stopped():
    clock = FakeClock()
    store = SessionStore(ttl_seconds=5, clock=clock)
    store.create_session("gone")
    clock.now += 10

    sweeper = SessionSweeper(store, interval=0.01)
    task = asyncio.create_task(sweeper.run_loop())
    await asyncio.sleep(0.05)
    sweeper.stop()
    await asyncio.wait_for(task, timeout=1)

    assert len(store) == 0


def test_revoke_user_drops_all_their_sessions():
    store = SessionStore()
    a1 = store.create_session("alice")
    a2 = store.create_session("alice")
    b = store.create_session("bob")

    assert store.revoke_user("alice") == 2
    assert store.resolve(a1) is None
    assert store.resolve(a2) is None
    assert store.resolve(b) == "bob"
    assert store.revoke_user("alice") == 0


def test_revoke_user_can_keep_one_session():
    store = SessionStore()
    keep = store.create_session("alice")
    drop = store.create_session("alice")

    assert store.revoke_user("alice", keep=keep) == 1
    assert store.resolve(keep) == "alice"
    assert not store.contains(drop)
