"""Registry configuration.

RouteConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouteConfig:
    """Defaults applied to every route a registry defines.

    All fields have sensible defaults. Override what you need::

        config = RouteConfig(strict=True, default_method="POST")
        registry = Registry(config)

    Per-route options passed to ``Registry.define()`` win over these.
    """

    # Routes
    default_method: str = "GET"
    default_event: str = "request"

    # Path matching
    sensitive: bool = False  # Case-sensitive matching
    strict: bool = False  # Disallow the optional trailing slash
    decode_params: bool = True  # Percent-decode captured segments

    # Action lists every new route starts with
    lifecycle_events: tuple[str, ...] = ("enter", "exit", "request", "connect", "disconnect")
