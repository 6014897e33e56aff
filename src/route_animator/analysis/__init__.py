"""Speed, heat, elevation-gain and split derivation."""

from route_animator.analysis.kinematics import KinematicsDeriver, SpeedRange, time_step_s

__all__ = ["KinematicsDeriver", "SpeedRange", "time_step_s"]
