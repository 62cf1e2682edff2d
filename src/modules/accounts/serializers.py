"""Authentication response serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.users.serializers import UserSerializer


class AuthResultSerializer(serializers.Serializer):
    """Renders ``AuthResult``: the token pair, access expiry and the user."""

    access_token = serializers.CharField()
    refresh_token = serializers.CharField()
    expires_at = serializers.DateTimeField()
    user = UserSerializer()
