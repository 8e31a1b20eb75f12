# This package holds the page renderers for the forecast results dashboard.
# Each page owns its own charts, tables, and explanatory copy.

__all__ = ["elasticity_explorer"]
