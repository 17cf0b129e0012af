from __future__ import annotations
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI

from splay_bridge._version import __version__
from splay_bridge.adapters.rpc_local import LocalRpc, with_bridge_procedures
from splay_bridge.runtime.config import BridgeSettings
from splay_bridge.runtime.log import configure_logging
from splay_server.api import router

# Load .env if present
load_dotenv()


def create_app(rpc: Optional[LocalRpc] = None, settings: Optional[BridgeSettings] = None) -> FastAPI:
    settings = settings or BridgeSettings.from_env()
    configure_logging(settings.log_level)
    app = FastAPI(title="Splay Bridge", version=__version__)
    app.state.rpc = with_bridge_procedures(rpc)
    app.include_router(router)
    return app


app = create_app()
