"""Audit log DRF serializer (output only)."""

from __future__ import annotations

from rest_framework import serializers

from modules.audit.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    user_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "user_id",
            "entity_type",
            "entity_id",
            "field_name",
            "old_value",
            "new_value",
            "changed_at",
            "changed_by",
            "ip_address",
            "user_agent",
        ]
        read_only_fields = fields
