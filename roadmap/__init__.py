from __future__ import annotations  # Re-export roadmap public API

from .roadmap import (
    GENERATE_ROADMAP_KEY,
    FreeResource,
    Roadmap,
    RoadmapPhase,
    RoadmapResource,
    generate_roadmap,
    generate_with_config,
    parse_roadmap,
)

__all__ = [
    "GENERATE_ROADMAP_KEY",
    "FreeResource",
    "Roadmap",
    "RoadmapPhase",
    "RoadmapResource",
    "generate_roadmap",
    "generate_with_config",
    "parse_roadmap",
]
