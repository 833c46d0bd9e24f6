"""DataLaser Engine: tabular-data type inference and exploratory analysis."""

__version__ = "1.0.0"
