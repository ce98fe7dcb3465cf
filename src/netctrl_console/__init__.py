"""netctrl console: data layer for the netctrl cluster management console."""

__version__ = "0.1.0"
