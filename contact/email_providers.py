"""
Transactional Email Providers

HTTP clients for the email APIs used to deliver offer notifications,
and the dispatcher that walks them in priority order:

    SendGrid -> Brevo -> Resend

A provider only takes part when its API key is configured. Every attempt
has a hard deadline of the configured timeout, measured over the whole
call including a slowly streamed response. An expired attempt is abandoned,
counts as failed, and the dispatcher moves on to the next provider.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as AttemptTimeout
from dataclasses import dataclass, field
from typing import List, Optional

import requests

from .exceptions import DeliveryError

logger = logging.getLogger(__name__)


@dataclass
class OutgoingEmail:
    to_email: str
    subject: str
    text_content: str
    html_content: str
    to_name: Optional[str] = None
    reply_to_email: Optional[str] = None
    reply_to_name: Optional[str] = None


@dataclass
class ProviderAttemptResult:
    success: bool
    provider: str
    error: Optional[str] = None
    status_code: Optional[int] = None


@dataclass
class DeliveryOutcome:
    attempts: List[ProviderAttemptResult] = field(default_factory=list)

    @property
    def sent(self) -> bool:
        return any(attempt.success for attempt in self.attempts)

    @property
    def provider(self) -> Optional[str]:
        """Name of the provider that delivered the message, if any."""
        for attempt in self.attempts:
            if attempt.success:
                return attempt.provider
        return None


class EmailProvider:
    """
    Base class for an HTTP email API.

    Subclasses describe the request (URL, headers, JSON body); sending,
    timeouts and error handling live here.
    """

    name = 'provider'
    api_url = None

    def __init__(self, credentials, timeout: float = 10):
        self.credentials = credentials
        self.timeout = timeout

    def get_headers(self) -> dict:
        raise NotImplementedError

    def build_payload(self, message: OutgoingEmail) -> dict:
        raise NotImplementedError

    def post(self, message: OutgoingEmail):
        return requests.post(
            self.api_url,
            json=self.build_payload(message),
            headers=self.get_headers(),
            timeout=self.timeout
        )

    def post_with_deadline(self, message: OutgoingEmail):
        """
        Run the request on a worker thread and stop waiting after the timeout.

        The requests timeout only bounds the connect and each read, so a
        trickling response could otherwise outlive it.
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f'email-{self.name}')
        try:
            future = executor.submit(self.post, message)
            return future.result(timeout=self.timeout)
        finally:
            executor.shutdown(wait=False)

    def send(self, message: OutgoingEmail) -> ProviderAttemptResult:
        """Send one message. Never raises; failures come back as a result."""
        try:
            response = self.post_with_deadline(message)

            if response.ok:
                logger.info(f"{self.name} accepted email to {message.to_email}")
                return ProviderAttemptResult(
                    success=True,
                    provider=self.name,
                    status_code=response.status_code,
                )

            logger.error(
                f"{self.name} API error response: {response.status_code} {response.text}"
            )
            return ProviderAttemptResult(
                success=False,
                provider=self.name,
                error=f'HTTP {response.status_code}',
                status_code=response.status_code,
            )

        except (requests.exceptions.Timeout, AttemptTimeout):
            logger.error(f"{self.name} request timed out after {self.timeout} seconds")
            return ProviderAttemptResult(
                success=False,
                provider=self.name,
                error='Request timeout',
            )

        except requests.exceptions.RequestException as e:
            logger.error(f"{self.name} network error: {e}")
            return ProviderAttemptResult(
                success=False,
                provider=self.name,
                error=f'Network error: {e}',
            )

        except Exception as e:
            logger.exception(f"Unexpected error sending email via {self.name}: {e}")
            return ProviderAttemptResult(
                success=False,
                provider=self.name,
                error=f'Unexpected error: {e}',
            )


class SendGridProvider(EmailProvider):
    """SendGrid v3 Mail Send API."""

    name = 'sendgrid'
    api_url = 'https://api.sendgrid.com/v3/mail/send'

    def get_headers(self):
        return {
            'Authorization': f'Bearer {self.credentials.api_key}',
            'Content-Type': 'application/json',
        }

    def build_payload(self, message):
        recipient = {'email': message.to_email}
        if message.to_name:
            recipient['name'] = message.to_name

        payload = {
            'personalizations': [{'to': [recipient]}],
            'from': {
                'email': self.credentials.sender_email,
                'name': self.credentials.sender_name,
            },
            'subject': message.subject,
            'content': [
                {'type': 'text/plain', 'value': message.text_content},
                {'type': 'text/html', 'value': message.html_content},
            ],
        }
        if message.reply_to_email:
            payload['reply_to'] = {'email': message.reply_to_email}
            if message.reply_to_name:
                payload['reply_to']['name'] = message.reply_to_name
        return payload


class BrevoProvider(EmailProvider):
    """Brevo (formerly Sendinblue) transactional email API."""

    name = 'brevo'
    api_url = 'https://api.brevo.com/v3/smtp/email'

    def get_headers(self):
        return {
            'accept': 'application/json',
            'api-key': self.credentials.api_key,
            'content-type': 'application/json',
        }

    def build_payload(self, message):
        recipient = {'email': message.to_email}
        if message.to_name:
            recipient['name'] = message.to_name

        payload = {
            'sender': {
                'name': self.credentials.sender_name,
                'email': self.credentials.sender_email,
            },
            'to': [recipient],
            'subject': message.subject,
            'htmlContent': message.html_content,
            'textContent': message.text_content,
        }
        if message.reply_to_email:
            payload['replyTo'] = {'email': message.reply_to_email}
            if message.reply_to_name:
                payload['replyTo']['name'] = message.reply_to_name
        return payload


class ResendProvider(EmailProvider):
    """Resend email API."""

    name = 'resend'
    api_url = 'https://api.resend.com/emails'

    def get_headers(self):
        return {
            'Authorization': f'Bearer {self.credentials.api_key}',
            'Content-Type': 'application/json',
        }

    def build_payload(self, message):
        payload = {
            'from': f'{self.credentials.sender_name} <{self.credentials.sender_email}>',
            'to': [message.to_email],
            'subject': message.subject,
            'text': message.text_content,
            'html': message.html_content,
        }
        if message.reply_to_email:
            payload['reply_to'] = message.reply_to_email
        return payload


# Priority order is fixed; configuration only decides who takes part
PROVIDER_CHAIN = (
    ('sendgrid', SendGridProvider),
    ('brevo', BrevoProvider),
    ('resend', ResendProvider),
)


def build_providers(config) -> List[EmailProvider]:
    """Instantiate the configured providers in priority order."""
    providers = []
    for attribute, provider_class in PROVIDER_CHAIN:
        credentials = getattr(config, attribute, None)
        if credentials and credentials.api_key:
            providers.append(provider_class(credentials, timeout=config.email_timeout))
    return providers


class EmailDispatcher:
    """
    Deliver a message through the first provider that accepts it.

    Usage:
        dispatcher = EmailDispatcher(build_providers(config))
        outcome = dispatcher.deliver(message)
    """

    def __init__(self, providers):
        self.providers = list(providers)

    def deliver(self, message: OutgoingEmail) -> DeliveryOutcome:
        """
        Try each provider in order, stopping at the first success.

        Raises:
            DeliveryError: No provider is configured, or every attempt failed.
                The error carries the outcome with all attempts made.
        """
        outcome = DeliveryOutcome()

        if not self.providers:
            raise DeliveryError('No email provider configured', outcome=outcome)

        for provider in self.providers:
            result = provider.send(message)
            outcome.attempts.append(result)
            if result.success:
                return outcome
            logger.warning(
                f"Email provider {result.provider} failed ({result.error}), trying next provider"
            )

        raise DeliveryError(
            f'All {len(outcome.attempts)} email providers failed',
            outcome=outcome
        )
