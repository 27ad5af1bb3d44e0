from .loader import load_config
from .models import (
    OutputConfig,
    SegTraceConfig,
    TraceConfig,
    VCSConfig,
)

__all__ = [
    "OutputConfig",
    "SegTraceConfig",
    "TraceConfig",
    "VCSConfig",
    "load_config",
]
