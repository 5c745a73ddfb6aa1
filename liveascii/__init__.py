"""Animation runtime for layered 2D character models: settings, motions, expressions, poses, blinking and face tracking."""

__version__ = "0.1.0"