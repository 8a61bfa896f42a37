"""User resource HTTP API.

This package contains the resource handling for user records: lookup, creation,
idempotent replace, JSON-patch style partial updates, deletion and paginated
listing, together with the runtime configuration, logging and database wiring
that serve them.
"""

__version__ = "0.1.0"
