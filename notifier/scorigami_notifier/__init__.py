"""Scorigami notifier: detects never-before-seen MLB final scores and announces them."""

__version__ = "1.0.0"
