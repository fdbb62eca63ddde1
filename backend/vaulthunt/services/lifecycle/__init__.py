"""Session and team lifecycle services.

Business rules over the session/team store: session creation with code
collision retry, idempotent team joins, token-checked team updates, admin word
updates and purging. HTTP routes and the CLI import from here, keeping
transport concerns out of the rules themselves.
"""
