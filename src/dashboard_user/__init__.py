# This package contains the Streamlit results view for seasonal forecasts with price elasticity.
# The modules separate input collection, UI components, and page rendering to keep maintenance straightforward.

__all__ = ["app"]
