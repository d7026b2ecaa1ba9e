from .config import RenderConfig, load_render_config, render_config_from_mapping
from .controller import InvalidationController
from .host import HostChannel, RecordingHostChannel
from .raster_cache import CacheEntry, DrawRoutine, RasterCache
from .renderer import DEFAULT_INDICATOR_SIZE, DEFAULT_LABEL, Renderer
from .runtime import HostMessage, HostRuntime, RuntimeTick, parse_host_message
from .state import MAX_SCALE_FACTOR, MIN_SCALE_FACTOR, RenderState, clamp_scale_factor

__all__ = [
    "CacheEntry",
    "DEFAULT_INDICATOR_SIZE",
    "DEFAULT_LABEL",
    "DrawRoutine",
    "HostChannel",
    "HostMessage",
    "HostRuntime",
    "InvalidationController",
    "MAX_SCALE_FACTOR",
    "MIN_SCALE_FACTOR",
    "RasterCache",
    "RecordingHostChannel",
    "RenderConfig",
    "RenderState",
    "Renderer",
    "RuntimeTick",
    "clamp_scale_factor",
    "load_render_config",
    "parse_host_message",
    "render_config_from_mapping",
]
