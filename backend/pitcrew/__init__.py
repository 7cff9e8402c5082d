"""Pitcrew - robotics team dashboard API with an interactive timeline scheduler."""

__version__ = "0.1.0"
