# ================================================================
# File     : config.py
# Purpose  : Configuration management for GroupMfaReport
# Notes    : Handles initial creation, loading, and env overrides
# ================================================================

import pathlib
from core.errors import ConfigError
from core.utils import fncPrintMessage, fncEnsureFolder, fncReadJSON, fncWriteJSON, fncLoadEnv, fncMask

DEFAULT_HOME = pathlib.Path.home() / ".groupmfareport"


# ================================================================
# Function: fncDefaultConfig
# Purpose : Return a default configuration dictionary
# Notes   : Called when config file does not exist
# ================================================================
def fncDefaultConfig() -> dict:
    return {
        "version": "1.0",
        "debug": False,
        "providers": {
            "entra": {
                "tenant_id": "",
                "client_id": "",
                "client_secret": "",
                "authority": "https://login.microsoftonline.com"
            }
        }
    }


# ================================================================
# Function: fncInitConfig
# Purpose : Create or load configuration file
# Notes   : Ensures base folder exists; returns full config dict
# ================================================================
def fncInitConfig(config_path: str = None) -> dict:
    path = pathlib.Path(config_path or (DEFAULT_HOME / "config.json"))

    try:
        fncEnsureFolder(path.parent)

        if not path.exists():
            fncPrintMessage(f"No config found at {path}. Creating default...", "warn")
            cfg = fncDefaultConfig()
            fncWriteJSON(str(path), cfg)
            return fncApplyEnvOverrides(cfg)
    except OSError as ex:
        raise ConfigError(f"Could not create config at '{path}': {ex}") from ex
    return fncLoadConfig(str(path))


# ================================================================
# Function: fncLoadConfig
# Purpose : Load configuration file and apply environment overrides
# Notes   : Missing keys are filled from the defaults
# ================================================================
def fncLoadConfig(config_path: str) -> dict:
    cfg = fncDefaultConfig()
    loaded = fncReadJSON(config_path)

    cfg["debug"] = bool(loaded.get("debug", cfg["debug"]))
    cfg["version"] = loaded.get("version", cfg["version"])
    entra = (loaded.get("providers") or {}).get("entra") or {}
    cfg["providers"]["entra"].update({k: v for k, v in entra.items() if v is not None})

    fncPrintMessage(f"Loaded configuration from {config_path}", "debug")
    return fncApplyEnvOverrides(cfg)


# ================================================================
# Function: fncApplyEnvOverrides
# Purpose : Overlay ENTRA_* environment variables on the config
# Notes   : Useful in CI/CD or containers
# ================================================================
def fncApplyEnvOverrides(cfg: dict) -> dict:
    entra = cfg["providers"]["entra"]
    entra.update({
        "tenant_id": fncLoadEnv("ENTRA_TENANT_ID", entra.get("tenant_id")),
        "client_id": fncLoadEnv("ENTRA_CLIENT_ID", entra.get("client_id")),
        "client_secret": fncLoadEnv("ENTRA_CLIENT_SECRET", entra.get("client_secret")),
        "authority": fncLoadEnv("ENTRA_AUTHORITY", entra.get("authority")),
    })
    fncPrintMessage(
        f"Entra config: tenant={entra.get('tenant_id') or '-'} "
        f"client={entra.get('client_id') or '-'} secret={fncMask(entra.get('client_secret')) or '-'}",
        "debug",
    )
    return cfg


# ================================================================
# Function: fncGetProviderConfig
# Purpose : Return config block for a specific provider
# ================================================================
def fncGetProviderConfig(cfg: dict, provider: str = "entra") -> dict:
    providers = cfg.get("providers", {})
    if provider not in providers:
        fncPrintMessage(f"Provider not found in config: {provider}", "warn")
        return {}
    return providers[provider]


# ================================================================
# Function: fncApplyCliOverrides
# Purpose : Apply command-line flags to the loaded config
# Notes   : --debug only ever switches debug on
# ================================================================
def fncApplyCliOverrides(cfg: dict, args) -> dict:
    if getattr(args, "debug", False):
        cfg["debug"] = True
    return cfg


# ================================================================
# Function: fncIsDebug
# Purpose : Return whether debug mode is enabled in config
# ================================================================
def fncIsDebug(cfg: dict) -> bool:
    return bool(cfg.get("debug", False))
