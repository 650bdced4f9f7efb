"""Version information for neo-auth-session."""

__version__ = "0.1.0"
