"""
Package marker for source code under `src`.
It holds the elasticity engine, the shared settings and logging helpers, and the Streamlit results view.
"""
