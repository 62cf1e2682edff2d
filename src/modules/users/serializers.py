"""User DRF serializers (output only).

The password hash is never rendered; the CPF is returned as stored
(digits only).
"""

from __future__ import annotations

from rest_framework import serializers

from modules.addresses.serializers import AddressSerializer
from modules.users.models import User


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    addresses = AddressSerializer(many=True, read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "first_name",
            "last_name",
            "full_name",
            "cpf",
            "email",
            "phone",
            "is_active",
            "created_at",
            "updated_at",
            "addresses",
        ]
        read_only_fields = fields
