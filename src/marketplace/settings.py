"""Marketplace settings read from the ``[custom]`` table of domain.toml."""

from typing import Any

from protean.utils.globals import current_domain

DEFAULTS: dict[str, Any] = {
    "PRESERVE_PARTIAL_WITHDRAWALS": False,
    "STRICT_STATUS_TRANSITIONS": False,
    "DEFAULT_PAYMENT_METHOD": "qr",
    "MAX_NOTE_LENGTH": 500,
    "MARKETS": ["San Nicolas Market", "Pampang Public Market"],
}


def setting(key: str, default: Any = None) -> Any:
    """Return a marketplace setting from the active domain's config.

    Falls back to ``default``, then to the built-in default for the key.
    """
    fallback = default if default is not None else DEFAULTS.get(key)
    try:
        custom = current_domain.config["custom"]
    except KeyError:
        return fallback
    if custom is None:
        return fallback
    return custom.get(key, fallback)
