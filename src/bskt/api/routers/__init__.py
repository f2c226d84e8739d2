"""API-key protected registry and mint routers."""
