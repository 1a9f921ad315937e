"""Application and dispatcher configuration.

Both configs are frozen dataclasses — immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RoutesConfig:
    """Options for a dispatcher produced by ``Router.routes()``.

    ``throw`` turns 405 and 501 outcomes into raised ``HTTPError``s for
    the host's error handling, instead of setting the status directly::

        app.use(router.routes(RoutesConfig(throw=True)))
    """

    throw: bool = False

    # Slot in ``ctx.state`` where plugin middleware reads its per-route options
    plugin_state_key: str = "plugins"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Host application configuration. Immutable after creation.

    Override what you need::

        config = AppConfig(debug=True)
    """

    # Include exception details in 500 bodies and HTTPError details in error bodies
    debug: bool = False
