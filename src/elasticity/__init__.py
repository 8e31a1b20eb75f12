"""
Package marker for source code under `src.elasticity`.
It groups the price-elasticity reconciliation engine under a stable import path.
Most functionality lives in the sibling modules; this file intentionally stays lightweight.
"""
