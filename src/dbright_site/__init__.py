"""Backend for the Dbright Services marketing site: contact intake and admin tools."""

__version__ = "0.1.0"
