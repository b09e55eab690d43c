"""Service settings, read from the ``[custom]`` section of ``domain.toml``."""

from protean.utils.globals import current_domain

_DEFAULTS = {
    "DEFAULT_WAREHOUSE": "MAIN",
    "TAX_RATE": 0.10,
    "FREE_SHIPPING_THRESHOLD": 100.0,
    "FLAT_SHIPPING_FEE": 10.0,
    "DEFAULT_PAGE_LIMIT": 20,
    "MAX_PAGE_LIMIT": 100,
}

DEFAULT_WAREHOUSE = _DEFAULTS["DEFAULT_WAREHOUSE"]


def setting(name: str):
    """Return a custom setting of the active domain, falling back to the built-in default."""
    custom = current_domain.config.get("custom") or {}
    return custom.get(name, _DEFAULTS[name])
