"""Editor settings.

Defaults live in :mod:`workflowdraw.constants`; each can be overridden with a
``WORKFLOWDRAW_*`` environment variable.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, TypeVar

from .constants import (
    DEFAULT_FONT_SIZE,
    DEFAULT_SHAPE_HEIGHT,
    DEFAULT_SHAPE_WIDTH,
    DEPTH_FLOOR,
    DEPTH_MAX,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "WORKFLOWDRAW_"

T = TypeVar("T")


@dataclass
class EditorSettings:
    """Tunable defaults for a diagram model."""

    depth_seed: int = DEPTH_MAX
    shape_width: float = DEFAULT_SHAPE_WIDTH
    shape_height: float = DEFAULT_SHAPE_HEIGHT
    label_font_size: int = DEFAULT_FONT_SIZE

    def __post_init__(self) -> None:
        self.depth_seed = max(DEPTH_FLOOR, min(DEPTH_MAX, int(self.depth_seed)))
        self.shape_width = max(0.0, float(self.shape_width))
        self.shape_height = max(0.0, float(self.shape_height))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EditorSettings":
        """Build settings from ``WORKFLOWDRAW_*`` variables.

        Args:
            environ: Mapping to read from; defaults to ``os.environ``.

        Returns:
            Settings with every malformed value replaced by its default.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            depth_seed=_read(env, "DEPTH_SEED", int, defaults.depth_seed),
            shape_width=_read(env, "SHAPE_WIDTH", float, defaults.shape_width),
            shape_height=_read(env, "SHAPE_HEIGHT", float, defaults.shape_height),
            label_font_size=_read(env, "FONT_SIZE", int, defaults.label_font_size),
        )


def _read(env: Mapping[str, str], name: str, parse: Callable[[str], T], default: T) -> T:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        logger.warning("Ignoring invalid %s%s=%r", ENV_PREFIX, name, raw)
        return default
