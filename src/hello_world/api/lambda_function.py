from __future__ import annotations

import atexit

from hello_world.api.handler import build_handler
from hello_world.infrastructure.observability.logging_config import configure_logging
from hello_world.infrastructure.observability.otel import (
    shutdown_telemetry_or_exit,
    start_telemetry,
)

configure_logging()
telemetry = start_telemetry()
atexit.register(shutdown_telemetry_or_exit, telemetry)

handler = build_handler(telemetry)
