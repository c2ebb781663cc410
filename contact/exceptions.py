"""
Contact Relay Errors

Validation and challenge failures are reported to the submitter as a
400 response. Delivery failures are only ever logged.
"""


class ContactRelayError(Exception):
    """Base class for offer relay errors."""

    default_message = 'Contact form error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class SubmissionValidationError(ContactRelayError):
    """A required field or the challenge token is missing."""

    default_message = 'Name, email, and offer are required'


class ChallengeVerificationError(ContactRelayError):
    """The challenge token was rejected or could not be verified."""

    default_message = 'Spam protection verification failed'


class DeliveryError(ContactRelayError):
    """No email provider delivered the message."""

    default_message = 'Email delivery failed'

    def __init__(self, message=None, outcome=None):
        super().__init__(message)
        self.outcome = outcome
