"""
Cloudflare Turnstile CAPTCHA Verification Service

Verifies Turnstile tokens from the offer form against the Cloudflare API.

Documentation: https://developers.cloudflare.com/turnstile/
"""

import requests
import logging

logger = logging.getLogger(__name__)


# Sent by the form instead of a real token when the widget is skipped
LOCALHOST_BYPASS_TOKEN = 'localhost-bypass'
WIDGET_BYPASS_TOKEN = 'bypassed'
BYPASS_TOKENS = frozenset({LOCALHOST_BYPASS_TOKEN, WIDGET_BYPASS_TOKEN})


class TurnstileVerificationError(Exception):
    """Raised when the verification request cannot be completed."""
    pass


def is_bypass_token(token) -> bool:
    return token in BYPASS_TOKENS


class TurnstileService:
    """
    Service for verifying Cloudflare Turnstile CAPTCHA tokens.

    Usage:
        service = TurnstileService(secret_key=config.turnstile_secret_key)
        is_valid = service.verify_token(token, user_ip='192.168.1.1')
    """

    VERIFY_URL = 'https://challenges.cloudflare.com/turnstile/v0/siteverify'

    def __init__(self, secret_key: str = None, timeout: float = 10):
        self.secret_key = secret_key
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.secret_key)

    def verify_token(self, token: str, user_ip: str = None) -> bool:
        """
        Verify a Turnstile token.

        Args:
            token: The Turnstile response token from the form
            user_ip: Optional user IP address for additional verification

        Returns:
            True if token is valid (or no secret key is configured), False otherwise

        Raises:
            TurnstileVerificationError: On unexpected failures while verifying
        """
        if not self.enabled:
            logger.warning("Turnstile secret key not configured - accepting token without verification")
            return True

        if not token:
            logger.warning("No Turnstile token provided")
            return False

        try:
            payload = {
                'secret': self.secret_key,
                'response': token,
            }

            if user_ip:
                payload['remoteip'] = user_ip

            response = requests.post(
                self.VERIFY_URL,
                data=payload,
                timeout=self.timeout
            )

            if response.status_code != 200:
                logger.error(
                    f"Turnstile API returned status {response.status_code}: {response.text}"
                )
                return False

            result = response.json()

            if result.get('success'):
                logger.info("Turnstile token verified successfully")
                return True

            error_codes = result.get('error-codes', [])
            logger.warning(
                f"Turnstile verification failed: {error_codes} ({self.get_error_message(error_codes)})"
            )

            return False

        except requests.exceptions.Timeout:
            logger.error("Turnstile verification timeout")
            return False  # Fail closed

        except requests.exceptions.RequestException as e:
            logger.error(f"Turnstile verification network error: {e}")
            return False  # Fail closed

        except ValueError as e:
            logger.error(f"Turnstile returned a malformed response: {e}")
            return False

        except Exception as e:
            logger.exception(f"Unexpected error during Turnstile verification: {e}")
            raise TurnstileVerificationError(str(e))

    def get_error_message(self, error_codes: list) -> str:
        """
        Convert Turnstile error codes to human-readable messages.

        Common error codes:
        - missing-input-secret: Secret key missing
        - invalid-input-secret: Secret key invalid
        - missing-input-response: Token missing
        - invalid-input-response: Token invalid or expired
        - timeout-or-duplicate: Token already used or expired
        """
        error_map = {
            'missing-input-secret': 'Server configuration error',
            'invalid-input-secret': 'Server configuration error',
            'missing-input-response': 'CAPTCHA verification required',
            'invalid-input-response': 'CAPTCHA verification failed. Please try again.',
            'timeout-or-duplicate': 'CAPTCHA expired or already used. Please refresh.',
        }

        messages = [error_map.get(code, f'Unknown error: {code}') for code in error_codes]
        return '; '.join(messages)
