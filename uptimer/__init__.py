"""uptimer — minimal uptime monitor with static status pages."""

__version__ = "0.1.0"
