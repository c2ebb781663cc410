"""
Process-wide site configuration.

Django settings are read once into an immutable SiteConfig which is then
handed to the services that need it, so business code never looks up
settings or environment variables on its own.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple

from django.conf import settings


@dataclass(frozen=True)
class ProviderCredentials:
    """API key and sender identity for one transactional email provider."""

    api_key: str
    sender_email: str
    sender_name: str


@dataclass(frozen=True)
class SiteConfig:
    domain_name: str
    asking_price: str
    currency: str
    payment_options: Tuple[str, ...]
    contact_email: str
    company_name: str = ''
    turnstile_site_key: str = ''
    turnstile_secret_key: str = ''
    sendgrid: Optional[ProviderCredentials] = None
    brevo: Optional[ProviderCredentials] = None
    resend: Optional[ProviderCredentials] = None
    email_timeout: float = 10

    @property
    def challenge_enabled(self) -> bool:
        return bool(self.turnstile_site_key)

    @property
    def asking_price_amount(self) -> Decimal:
        """Asking price as a number, zero if the configured value is not numeric."""
        try:
            return Decimal(str(self.asking_price).replace(',', '').strip())
        except InvalidOperation:
            return Decimal('0')

    @classmethod
    def from_settings(cls, source=None):
        """Build the configuration from Django settings (or any settings-like object)."""
        if source is None:
            source = settings

        def credentials(api_key_name, email_name, name_name):
            api_key = getattr(source, api_key_name, '')
            if not api_key:
                return None
            return ProviderCredentials(
                api_key=api_key,
                sender_email=getattr(source, email_name, '') or 'noreply@yourdomain.com',
                sender_name=getattr(source, name_name, '') or 'Domain Sales',
            )

        payment_options = getattr(source, 'PAYMENT_OPTIONS', '')
        if isinstance(payment_options, str):
            payment_options = payment_options.split(',')

        return cls(
            domain_name=getattr(source, 'DOMAIN_NAME', 'example.com'),
            asking_price=str(getattr(source, 'DOMAIN_PRICE', '1000')),
            currency=getattr(source, 'DOMAIN_CURRENCY', 'USD'),
            payment_options=tuple(
                option.strip() for option in payment_options if option.strip()
            ),
            contact_email=getattr(source, 'CONTACT_EMAIL_TO', 'contact@example.com'),
            company_name=getattr(source, 'COMPANY_NAME', ''),
            turnstile_site_key=getattr(source, 'TURNSTILE_SITE_KEY', ''),
            turnstile_secret_key=getattr(source, 'TURNSTILE_SECRET_KEY', ''),
            sendgrid=credentials('SENDGRID_API_KEY', 'SENDGRID_FROM_EMAIL', 'SENDGRID_FROM_NAME'),
            brevo=credentials('BREVO_API_KEY', 'BREVO_SENDER_EMAIL', 'BREVO_SENDER_NAME'),
            resend=credentials('RESEND_API_KEY', 'RESEND_FROM_EMAIL', 'RESEND_FROM_NAME'),
            email_timeout=getattr(source, 'EMAIL_PROVIDER_TIMEOUT', 10),
        )


_site_config = None


def get_site_config() -> SiteConfig:
    """Get or create the singleton site configuration."""
    global _site_config
    if _site_config is None:
        _site_config = SiteConfig.from_settings()
    return _site_config


def reset_site_config():
    """Drop the cached configuration so the next lookup rereads settings."""
    global _site_config
    _site_config = None
