"""
Radvizmath package for RadViz anchor placement.

This is the numerical core behind RadViz charts: normalization, anchor
layout, projection, variable similarity and anchor ordering strategies.
"""

__version__ = '0.1.0'

from radvizmath.pipeline import RadvizPipeline, RadvizResult, chart_data
from radvizmath.components.config import Config, ConfigManager
