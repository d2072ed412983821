from dataclasses import dataclass
from dynaconf import Dynaconf
from backend.app.constants import DEFAULTS

from flowcanvas.config.settings import (
    PortConfig,
    ConnectionPolicyConfig,
    MutationQueueConfig,
    FlowCanvasConfig,
)

settings = Dynaconf(
    envvar_prefix="FLOWCANVAS",
    load_dotenv=True,
    settings_files=[],
)
# Environment variables win over the defaults
for _key, _value in DEFAULTS.items():
    settings.setdefault(_key, _value)


@dataclass(frozen=True)
class AppConfig:
    # ---------------- App ----------------
    app_name: str = settings.get("APP_NAME", "flowcanvas-backend")
    api_prefix: str = settings.get("API_PREFIX", "")

    # ---------------- Canvas Policy ----------------
    canvas: FlowCanvasConfig = FlowCanvasConfig(
        ports=PortConfig(
            radius=float(settings.get("PORT_RADIUS", 15.0)),
            alignment=settings.get("PORT_ALIGNMENT", "CENTER"),
        ),
        connections=ConnectionPolicyConfig(
            allow_multiple_inbound=settings.get("CONNECTIONS_ALLOW_MULTIPLE_INBOUND", True),
            allow_node_self_loop=settings.get("CONNECTIONS_ALLOW_NODE_SELF_LOOP", False),
        ),
        queue=MutationQueueConfig(
            default_delay_ms=float(settings.get("QUEUE_DEFAULT_DELAY_MS", 0.0)),
            coalesce_delay_ms=float(settings.get("QUEUE_COALESCE_DELAY_MS", 0.0)),
            history_limit=int(settings.get("QUEUE_HISTORY_LIMIT", 1000)),
        ),
        seed_start_node=settings.get("SEED_START_NODE", True),
    )
