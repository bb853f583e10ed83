"""
System components for RadViz math.

This module provides the configuration layer shared by the pipeline and the
command line entry point.
"""

from radvizmath.components.config import Config, ConfigManager
