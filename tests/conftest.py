import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import asyncio

import pytest
from splay_bridge.adapters.element_tree import Fragment, create_element
from splay_bridge.adapters.hydrator_framework import create_framework_hydrator
from splay_bridge.adapters.hydrator_generic import create_hydrator
from splay_bridge.adapters.rpc_local import LocalRpc, with_bridge_procedures
from splay_bridge.descriptor import element, fragment, null


def user_card(ctx):
    user = ctx["data"]["user"]
    return element(
        "card",
        {"title": user["name"], "subtitle": ""},
        element("avatar", {"src": user.get("avatar")}),
        fragment(element("text", {"value": user["email"]}), null()),
        key=user["id"],
    )


async def ticker(ctx):
    for n in range(ctx["data"].get("count", 3)):
        await asyncio.sleep(0)
        yield element("text", {"value": f"tick {n}"})


async def broken_ticker(ctx):
    yield element("text", {"value": "tick 0"})
    raise RuntimeError("upstream exploded")


@pytest.fixture
def ctx():
    return {"data": {"user": {"id": "u1", "name": "Nina", "email": "nina@example.com"}, "count": 3}, "size": {"width": 320, "height": 200}}


@pytest.fixture
def rpc():
    r = with_bridge_procedures(LocalRpc())
    r.register("ui.user-card", user_card)
    r.register_stream("ui.ticker", ticker)
    r.register_stream("ui.broken", broken_ticker)
    return r


def _render(type_name):
    def render(props, children, key):
        return {"type": type_name, "props": props, "children": children, "key": key}
    return render


@pytest.fixture
def components():
    return {name: _render(name) for name in ("card", "avatar", "text")}


@pytest.fixture
def hydrator(components):
    return create_hydrator(components)


@pytest.fixture
def framework_hydrator():
    return create_framework_hydrator(create_element, {"card": "section", "avatar": "img", "text": "span"}, Fragment)
