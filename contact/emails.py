"""
Offer Email Templates

Subject and body for the owner notification and the sender confirmation,
in German for locale 'de' and English for everything else.
"""
from django.template.defaultfilters import linebreaksbr

from core.locales import is_german
from .email_providers import OutgoingEmail


def _html(text):
    """HTML alternative of a plain text body, user input escaped."""
    return linebreaksbr(text, autoescape=True)


def compose_owner_notification(payload, config) -> OutgoingEmail:
    """
    Build the notification sent to the domain owner.

    Replies go straight to the person who made the offer.
    """
    domain_name = config.domain_name

    if is_german(payload.locale):
        subject = f"Neues Angebot für {domain_name}"
        text_content = f"""Neue Anfrage für Domain: {domain_name}

Von: {payload.name}
E-Mail: {payload.email}
Telefon: {payload.phone or 'Nicht angegeben'}
Angebot: {payload.offer}

Nachricht:
{payload.message or 'Keine zusätzliche Nachricht'}

---
Diese E-Mail wurde automatisch von der Domain-Verkaufsseite generiert.
"""
    else:
        subject = f"New Offer for {domain_name}"
        text_content = f"""New inquiry for domain: {domain_name}

From: {payload.name}
Email: {payload.email}
Phone: {payload.phone or 'Not provided'}
Offer: {payload.offer}

Message:
{payload.message or 'No additional message provided'}

---
This email was automatically generated from the domain sales page.
"""

    return OutgoingEmail(
        to_email=config.contact_email,
        subject=subject,
        text_content=text_content,
        html_content=_html(text_content),
        reply_to_email=payload.email,
        reply_to_name=payload.name,
    )


def compose_confirmation(payload, config) -> OutgoingEmail:
    """Build the receipt sent back to the person who made the offer."""
    domain_name = config.domain_name

    if is_german(payload.locale):
        subject = f"Bestätigung: Ihr Angebot für {domain_name} wurde erhalten"
        text_content = f"""Hallo {payload.name},

vielen Dank für Ihr Interesse an der Domain {domain_name}.

Wir haben Ihr Angebot erfolgreich erhalten und werden es sorgfältig prüfen.
Unser Team wird sich innerhalb von 24 Stunden bei Ihnen melden.

Falls Sie in der Zwischenzeit Fragen haben, können Sie gerne auf diese E-Mail antworten.

Mit freundlichen Grüßen
Das {domain_name} Team

---
Diese E-Mail wurde automatisch generiert.
"""
    else:
        subject = f"Confirmation: Your offer for {domain_name} has been received"
        text_content = f"""Hello {payload.name},

Thank you for your interest in the domain {domain_name}.

We have successfully received your offer and will review it carefully.
Our team will get back to you within 24 hours.

If you have any questions in the meantime, feel free to reply to this email.

Best regards,
The {domain_name} Team

---
This email was automatically generated.
"""

    return OutgoingEmail(
        to_email=payload.email,
        to_name=payload.name,
        subject=subject,
        text_content=text_content,
        html_content=_html(text_content),
    )
