from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from apps.subscriptions.serializers import SubscriptionStatusSerializer
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Profile of the signed-in owner. Only ``display_name`` is writable."""

    is_admin = serializers.BooleanField(source='is_staff', read_only=True)
    name = serializers.CharField(source='get_display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name', 'name', 'is_admin', 'created_at', 'last_login']
        read_only_fields = ['id', 'email', 'created_at', 'last_login']


class AccountOverviewSerializer(serializers.Serializer):
    user = UserSerializer()
    subscription = SubscriptionStatusSerializer()
    default_store_id = serializers.UUIDField(allow_null=True)


class RegisterInputSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, validators=[validate_password],
                                     style={'input_type': 'password'})
    password_confirm = serializers.CharField(write_only=True, style={'input_type': 'password'})
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['password'] != attrs.pop('password_confirm'):
            raise serializers.ValidationError({'password_confirm': 'Passwords do not match'})
        return attrs


class LoginInputSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})


class PasswordChangeInputSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True)


class LogoutInputSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False, help_text="Refresh token of the session being closed")
