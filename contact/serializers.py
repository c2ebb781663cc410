"""
Contact Form Serializers

Turns the JSON body of an offer submission into a SubmissionPayload.
Required-field checks happen in the relay service so that every missing
field produces the same error message.
"""
from rest_framework import serializers
from django.utils.html import strip_tags

from core.locales import DEFAULT_LOCALE
from .services import SubmissionPayload


class ContactSubmissionSerializer(serializers.Serializer):
    """
    Public offer form submission serializer.

    Email addresses are not format-checked, only required to be present.
    """

    name = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        help_text="Name of the person making the offer"
    )

    email = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        help_text="Address for the reply and the confirmation email"
    )

    phone = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
    )

    offer = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        help_text="Free-form price or offer description"
    )

    message = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
    )

    locale = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        help_text="Page locale, selects the email language"
    )

    challengeToken = serializers.CharField(
        source='challenge_token',
        required=False,
        allow_blank=True,
        allow_null=True,
        help_text="Turnstile token or a bypass sentinel"
    )

    def validate_name(self, value):
        """Sanitize name field."""
        if value is None:
            return value
        return strip_tags(value).strip()

    def validate_locale(self, value):
        return value or DEFAULT_LOCALE

    def to_payload(self) -> SubmissionPayload:
        data = {key: value for key, value in self.validated_data.items() if value is not None}
        return SubmissionPayload(**data)
