"""Resource domains served by netctrl-server."""
