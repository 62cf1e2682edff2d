"""Address DRF serializers (output only).

Input is parsed into Pydantic DTOs (``dtos.py``); these serializers only
render models for the response envelope.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.addresses.models import Address


class AddressSerializer(serializers.ModelSerializer):
    user_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Address
        fields = [
            "id",
            "user_id",
            "street",
            "number",
            "neighborhood",
            "complement",
            "city",
            "state",
            "zip_code",
            "country",
            "is_primary",
            "created_at",
        ]
        read_only_fields = fields
