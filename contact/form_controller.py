"""
Offer Form Controller

Client-side model of the offer form on the sale page: field state, the
Turnstile widget state and the submission lifecycle

    EDITABLE -> SUBMITTING -> SUBMITTED
                SUBMITTING -> EDITABLE   (on any failure)
    SUBMITTED -> EDITABLE                (reset only)

It posts to the relay endpoint with ``requests`` and is what the page
(or a script driving it) uses to submit an offer.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from core.locales import resolve_locale
from core.turnstile_service import LOCALHOST_BYPASS_TOKEN, WIDGET_BYPASS_TOKEN

logger = logging.getLogger(__name__)

CHALLENGE_REQUIRED_MESSAGE = 'Please complete the spam protection challenge.'
GENERIC_ERROR_MESSAGE = 'Failed to send message. Please try again.'

LOCAL_HOSTNAMES = ('localhost', '127.0.0.1')


class FormStatus(enum.Enum):
    EDITABLE = 'editable'
    SUBMITTING = 'submitting'
    SUBMITTED = 'submitted'


class ChallengeStatus(enum.Enum):
    PENDING = 'pending'   # widget not loaded yet
    READY = 'ready'       # widget loaded, token may or may not be present
    FAILED = 'failed'     # widget errored; submissions go through unverified


@dataclass
class ChallengeState:
    status: ChallengeStatus = ChallengeStatus.PENDING
    token: Optional[str] = None


@dataclass
class SubmissionResult:
    success: bool
    error: Optional[str] = None
    confirmation_sent: bool = False
    blocked: bool = False


class SubmissionFormController:
    """
    Drive the offer form.

    Usage:
        form = SubmissionFormController(
            'https://example.com/api/contact',
            locale='de',
            site_key=listing['turnstileSiteKey'],
            hostname='example.com',
        )
        form.update_field('name', 'Jane')
        form.challenge_succeeded(token)
        result = form.submit()
    """

    FIELDS = ('name', 'email', 'phone', 'offer', 'message')

    def __init__(self, endpoint_url, locale=None, site_key=None, hostname='',
                 session=None, timeout=15):
        self.endpoint_url = endpoint_url
        self.locale = resolve_locale(locale)
        self.site_key = site_key or ''
        self.hostname = hostname or ''
        self.session = session or requests.Session()
        self.timeout = timeout

        self.fields = self._empty_fields()
        self.challenge = ChallengeState()
        self.status = FormStatus.EDITABLE
        self.error = None

    @staticmethod
    def _empty_fields():
        return {field: '' for field in SubmissionFormController.FIELDS}

    @property
    def is_local(self) -> bool:
        return any(host in self.hostname for host in LOCAL_HOSTNAMES)

    @property
    def challenge_required(self) -> bool:
        """The widget is shown only with a site key and off localhost."""
        return bool(self.site_key) and not self.is_local

    @property
    def is_submitting(self) -> bool:
        return self.status is FormStatus.SUBMITTING

    @property
    def submitted(self) -> bool:
        return self.status is FormStatus.SUBMITTED

    @property
    def can_submit(self) -> bool:
        """Whether the submit button should be enabled (advisory)."""
        if self.is_submitting:
            return False
        if (
            self.challenge_required
            and self.challenge.status is ChallengeStatus.PENDING
            and not self.challenge.token
        ):
            return False
        return True

    # ------------------------------------------------------------------
    # Field and widget events
    # ------------------------------------------------------------------

    def update_field(self, name, value):
        if name not in self.fields:
            raise KeyError(f"Unknown form field: {name}")
        self.fields[name] = value

    def challenge_loaded(self):
        # A token may already have arrived before the load callback
        self.challenge = ChallengeState(ChallengeStatus.READY, self.challenge.token)

    def challenge_succeeded(self, token):
        self.challenge = ChallengeState(ChallengeStatus.READY, token)

    def challenge_failed(self):
        logger.warning("Turnstile widget error - allowing submission without token")
        self.challenge = ChallengeState(ChallengeStatus.FAILED, None)

    def challenge_expired(self):
        self.challenge = ChallengeState(ChallengeStatus.READY, None)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def _challenge_blocks_submit(self) -> bool:
        return (
            self.challenge_required
            and self.challenge.status is ChallengeStatus.READY
            and not self.challenge.token
        )

    def _resolve_token(self) -> str:
        if self.challenge.token:
            return self.challenge.token
        return LOCALHOST_BYPASS_TOKEN if self.is_local else WIDGET_BYPASS_TOKEN

    def build_request_body(self) -> dict:
        body = dict(self.fields)
        body['locale'] = self.locale
        body['challengeToken'] = self._resolve_token()
        return body

    def submit(self) -> SubmissionResult:
        """
        Send the offer to the relay endpoint.

        Blocked locally, without a request, while the widget is loaded but
        has not produced a token.
        """
        if self._challenge_blocks_submit():
            self.error = CHALLENGE_REQUIRED_MESSAGE
            return SubmissionResult(success=False, error=CHALLENGE_REQUIRED_MESSAGE, blocked=True)

        self.status = FormStatus.SUBMITTING
        self.error = None
        result = SubmissionResult(success=False, error=GENERIC_ERROR_MESSAGE)

        try:
            response = self.session.post(
                self.endpoint_url,
                json=self.build_request_body(),
                timeout=self.timeout
            )

            if response.ok:
                data = self._json(response)
                result = SubmissionResult(
                    success=True,
                    confirmation_sent=bool(data.get('confirmationSent', False)),
                )
            else:
                data = self._json(response)
                result = SubmissionResult(
                    success=False,
                    error=data.get('error') or GENERIC_ERROR_MESSAGE,
                )

        except requests.exceptions.RequestException as e:
            logger.error(f"Offer submission failed: {e}")

        finally:
            if result.success:
                self.status = FormStatus.SUBMITTED
            else:
                self.status = FormStatus.EDITABLE
                self.error = result.error

        return result

    @staticmethod
    def _json(response) -> dict:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def reset(self):
        """Go back to an empty form after a successful submission."""
        if not self.submitted:
            return
        self.fields = self._empty_fields()
        self.challenge = ChallengeState()
        self.error = None
        self.status = FormStatus.EDITABLE
