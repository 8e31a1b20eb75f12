# This package groups reusable Streamlit components used by the elasticity results view.
# It exists to keep visual patterns and interaction logic consistent across sections.
# Sharing these helpers keeps page modules focused on narrative and insights.

__all__ = ["inputs", "charts"]
