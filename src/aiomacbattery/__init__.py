"""Mac battery fleet telemetry library using aiohttp."""

__all__ = [
    "auth",
    "config",
    "const",
    "exceptions",
    "export",
    "fleet",
    "model",
    "normalizer",
    "notify",
    "reader",
    "session",
    "telemetry",
    "utils",
]
