# ================================================================
# File     : session.py
# Purpose  : Session check: confirm the Graph client stack is present
#            and open an authenticated GraphClient
# ================================================================

import importlib.util
import sys

from core.config import fncGetProviderConfig
from core.errors import ClientUnavailable
from core.utils import fncPrintMessage

REQUIRED_LIBRARIES = ["msal", "requests"]


# ================================================================
# Function: fncCheckClientLibrary
# Purpose : Verify the directory client libraries can be imported
# Notes   : Raises ClientUnavailable naming the missing packages
# ================================================================
def fncCheckClientLibrary(libraries=None) -> None:
    missing = [lib for lib in (libraries or REQUIRED_LIBRARIES) if importlib.util.find_spec(lib) is None]
    if missing:
        raise ClientUnavailable(
            f"Required client libraries not installed: {', '.join(missing)} "
            f"(pip install {' '.join(missing)})"
        )
    fncPrintMessage(f"Client libraries present: {', '.join(libraries or REQUIRED_LIBRARIES)}", "debug")


# ================================================================
# Function: fncConnectGraph
# Purpose : Build an authenticated GraphClient from config/env
# Notes   : Prompts for missing credentials only when interactive;
#           token failures surface as ConnectionFailure
# ================================================================
def fncConnectGraph(cfg: dict, interactive: bool = None):
    fncCheckClientLibrary()
    from handlers.graph.client import GraphClient

    if interactive is None:
        interactive = sys.stdin.isatty()

    entra_cfg = fncGetProviderConfig(cfg, "entra")
    tenant_id = entra_cfg.get("tenant_id")
    client_id = entra_cfg.get("client_id")
    client_secret = entra_cfg.get("client_secret")

    if not all([tenant_id, client_id, client_secret]) and interactive:
        fncPrintMessage("Missing Entra credentials — dropping into interactive mode…", "warn")

    return GraphClient(
        tenant_id=tenant_id,
        client_id=client_id,
        client_secret=client_secret,
        authority=entra_cfg.get("authority"),
        interactive=interactive,
    )
