from dataclasses import dataclass, field
from typing import Optional

from .cache import DEFAULT_CACHE_DIR, DEFAULT_PROJECT_CACHE_DIR
from .models import HeuristicsConfig


@dataclass
class ServiceConfig:
    root_dir: str = "."
    cache_dir: str = DEFAULT_CACHE_DIR
    project_cache_dir: str = DEFAULT_PROJECT_CACHE_DIR
    project_id: Optional[str] = None
    heuristics: HeuristicsConfig = field(default_factory=HeuristicsConfig)
