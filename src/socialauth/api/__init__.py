# socialauth REST API layer
# Created: 2026-10-12
#
# Handshake routes at /twitch/* and /twitter/*, API-key protected routes at /api/v1/.
