"""Serializers for user profile, registration, and sign-in.

- UserMeSerializer: read-only profile data for the authenticated user.
- RegistrationSerializer: creates customer accounts with password validation
  and unique email enforcement.
- SignInSerializer: authenticates by email and password and issues JWTs.
"""

from django.core.validators import RegexValidator
from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User


def issue_tokens(user: User) -> dict:
    """Return an access/refresh pair for the user."""
    refresh = RefreshToken.for_user(user)
    refresh["role"] = user.role
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


class UserMeSerializer(serializers.ModelSerializer):
    """Serializer returning profile fields for the current user."""

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "role",
            "phone",
            "is_verified",
            "vendor_ref",
            "date_joined",
        ]
        read_only_fields = fields


class RegistrationSerializer(serializers.Serializer):
    """Action serializer to register a new customer.

    The email doubles as the username. Django's password validators run
    against the provided password and `set_password` hashes it with bcrypt.
    """

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    phone = serializers.CharField(
        max_length=16,
        required=False,
        allow_blank=True,
        validators=[RegexValidator(r"^\+?[1-9]\d{1,14}$", message="Use E.164 format (e.g., +212600000000)")],
    )

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        if User.objects.filter(email=value).exists():
            raise serializers.ValidationError("Email already registered.", code="duplicate")
        return value

    def validate_password(self, value: str) -> str:
        from django.contrib.auth.password_validation import validate_password

        user = User(username=self.initial_data.get("email", ""), email=self.initial_data.get("email", ""))
        validate_password(value, user=user)
        return value

    def create(self, validated_data):
        user = User(
            username=validated_data["email"],
            email=validated_data["email"],
            first_name=validated_data["first_name"],
            last_name=validated_data["last_name"],
            phone=validated_data.get("phone", ""),
        )
        user.set_password(validated_data["password"])
        user.save()
        return user


class SignInSerializer(serializers.Serializer):
    """Authenticate with email and password.

    On success `validated_data["user"]` holds the authenticated user.
    """

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        email = attrs["email"].strip().lower()
        try:
            user = User.objects.get(email=email)
        except User.DoesNotExist:
            user = None
        if not user or not user.is_active or not user.check_password(attrs["password"]):
            raise serializers.ValidationError({"detail": "Invalid credentials."})
        return {"user": user}


class SignOutSerializer(serializers.Serializer):
    """Optional refresh token to blacklist on sign-out."""

    refresh = serializers.CharField(required=False, allow_blank=True)
