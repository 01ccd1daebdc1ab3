import pytest

from cfbproxy.context import build_context
from fakes import FakeClient, FakeStore, make_settings


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def ctx(store, client):
    """Context with a reachable store; store.calls starts empty."""
    context = build_context(make_settings(), client=client, store=store)
    store.calls.clear()
    return context
