"""Numeric tolerances for the routing core and settings for the HTTP server."""

from __future__ import annotations

import os

from pydantic import BaseModel

# Below this, cross products and squared lengths are treated as zero.
EPSILON = 1e-10

# Per-axis tolerance for "this point lies on that segment" and point equality.
POINT_TOLERANCE = 0.001

# Edges shorter than this are dropped while building the graph.
MIN_EDGE_LENGTH = 0.001

# Decimal digits kept in canonical node ids.
ID_PRECISION = 6

ENV_PREFIX = "ROAD_PATHFINDER_"


class ServerSettings(BaseModel):
    """Where and how ``main.py`` runs the FastAPI app."""

    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ServerSettings:
        """Build settings from ``ROAD_PATHFINDER_*`` environment variables."""
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if key in environ:
                values[name] = environ[key]
        return cls.model_validate(values)
