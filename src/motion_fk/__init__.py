"""Acclaim (ASF/AMC) skeleton parsing and forward kinematics."""

__version__ = "0.1.0"
