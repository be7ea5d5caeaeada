"""Coarse pupil localization and pupil hypothesis confidence estimation."""

__version__ = "0.1"
