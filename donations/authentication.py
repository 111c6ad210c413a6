"""
DRF authentication for the game server endpoints.

The token is accepted either as "Authorization: Bearer <token>" or as a
"token" field in the request body. Authentication runs before the view body,
so a rejected request never touches the database.
"""

from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication, get_authorization_header

from donations.application.queue import ConsumerGate
from donations.domain.exceptions import Unauthorized
from donations.services import get_config


class GameServer:
    """Principal attached to requests that presented the shared token."""

    is_authenticated = True
    is_anonymous = False

    def __str__(self):
        return "game-server"


class ConsumerTokenAuthentication(BaseAuthentication):
    keyword = "Bearer"

    def authenticate(self, request):
        token = self._header_token(request)
        if not token and hasattr(request.data, "get"):
            token = request.data.get("token")
        if not token:
            return None

        try:
            ConsumerGate(get_config()).authenticate(token)
        except Unauthorized as exc:
            raise exceptions.AuthenticationFailed(str(exc))

        return GameServer(), token

    def _header_token(self, request):
        auth = get_authorization_header(request).split()
        if not auth or auth[0].lower() != self.keyword.lower().encode():
            return None
        if len(auth) != 2:
            raise exceptions.AuthenticationFailed("Invalid token header.")
        try:
            return auth[1].decode()
        except UnicodeError:
            raise exceptions.AuthenticationFailed("Invalid token header.")

    def authenticate_header(self, request):
        return self.keyword
