"""
WebSocket Gateway Components.

Organized by domain:
- core/: Constants and connection context for audit logging
- connection/: Connection registry and periodic stats monitor
- auth/: Token verification for the authenticate frame
- events/: Inbound frame parsing and outbound domain event handlers
"""
