"""Plant telemetry threshold evaluation and multi-channel alert dispatch."""

__version__ = "0.1.0"
