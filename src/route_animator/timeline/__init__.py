"""Uniform time-grid resampling."""

from route_animator.timeline.models import Sample
from route_animator.timeline.resampler import TemporalResampler, frame_count_for

__all__ = ["Sample", "TemporalResampler", "frame_count_for"]
