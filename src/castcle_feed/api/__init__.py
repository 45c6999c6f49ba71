"""HTTP API for the Castcle feed service."""
