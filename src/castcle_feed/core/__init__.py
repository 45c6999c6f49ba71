"""Core configuration for the Castcle feed service."""
