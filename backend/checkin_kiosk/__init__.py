"""Check-in kiosk agent - keeps a customer kiosk in sync with its lane session."""

__version__ = "0.1.0"
