"""
Outgoing email: the Mailer interface, a logging implementation, and
builders for every message the API sends.

Delivery is pluggable; the default LoggingMailer only records messages in
the log so the API runs without an SMTP relay.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from urllib.parse import urlencode

from .config import config
from .localization import normalize_locale

logger = logging.getLogger(__name__)

SITE_NAME = "Women Spot"

SUBJECTS: dict[str, dict[str, str]] = {
    "subscription": {
        "en": "Confirm your newsletter subscription",
        "pt": "Confirme a sua subscrição da newsletter",
        "es": "Confirma tu suscripción al boletín",
        "fr": "Confirmez votre abonnement à la newsletter",
        "de": "Bestätigen Sie Ihr Newsletter-Abonnement",
        "it": "Conferma la tua iscrizione alla newsletter",
    },
    "account": {
        "en": "Confirm your email address",
        "pt": "Confirme o seu endereço de email",
        "es": "Confirma tu dirección de correo electrónico",
        "fr": "Confirmez votre adresse e-mail",
        "de": "Bestätigen Sie Ihre E-Mail-Adresse",
        "it": "Conferma il tuo indirizzo email",
    },
    "password_reset": {
        "en": "Password Reset Request",
        "pt": "Solicitação de Redefinição de Senha",
        "es": "Solicitud de Restablecimiento de Contraseña",
        "fr": "Demande de Réinitialisation de Mot de Passe",
        "de": "Passwort-Reset-Anfrage",
        "it": "Richiesta di Reset Password",
    },
    "comment_report": {
        "en": "Your comment has been reported",
        "pt": "O seu comentário foi denunciado",
        "es": "Tu comentario ha sido denunciado",
        "fr": "Votre commentaire a été signalé",
        "de": "Ihr Kommentar wurde gemeldet",
        "it": "Il tuo commento è stato segnalato",
    },
    "newsletter": {
        "en": "Your newsletter",
        "pt": "A sua newsletter",
        "es": "Tu boletín",
        "fr": "Votre newsletter",
        "de": "Ihr Newsletter",
        "it": "La tua newsletter",
    },
}


@dataclass
class EmailMessage:
    to: str
    subject: str
    body: str


class Mailer(ABC):
    """Abstract outgoing mail transport."""

    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> None:
        """Deliver one message. Raises on delivery failure."""
        pass

    def deliver(self, message: EmailMessage) -> None:
        self.send(message.to, message.subject, message.body)


class LoggingMailer(Mailer):
    """Mailer that writes messages to the log instead of sending them."""

    def send(self, to: str, subject: str, body: str) -> None:
        logger.info(f"Email to {to}: {subject}")
        logger.debug(body)


def _subject(kind: str, locale: str) -> str:
    subjects = SUBJECTS[kind]
    return f"{subjects.get(normalize_locale(locale), subjects['en'])} - {SITE_NAME}"


def email_link(route: str, params: dict[str, str], locale: str = "en") -> str:
    """Build a localized site link: ``{BASE_URL}/{locale}/{route}?params``."""
    query = urlencode(params)
    url = f"{config.BASE_URL.rstrip('/')}/{normalize_locale(locale)}/{route}"
    return f"{url}?{query}" if query else url


def subscription_confirmation(email: str, token: str, unsubscribe_token: str, locale: str = "en") -> EmailMessage:
    confirm = email_link("confirm-newsletter", {"email": email, "token": token}, locale)
    unsubscribe = email_link("unsubscribe", {"email": email, "token": unsubscribe_token}, locale)
    body = (
        f"Thanks for subscribing to the {SITE_NAME} newsletter.\n\n"
        f"Confirm your subscription: {confirm}\n\n"
        f"If you did not request this, unsubscribe here: {unsubscribe}\n"
    )
    return EmailMessage(email, _subject("subscription", locale), body)


def account_confirmation(email: str, username: str, token: str, locale: str = "en") -> EmailMessage:
    link = email_link("confirm-email", {"token": token}, locale)
    body = f"Hi {username},\n\nConfirm your email address: {link}\n"
    return EmailMessage(email, _subject("account", locale), body)


def password_reset(email: str, token: str, ttl_minutes: int, locale: str = "en") -> EmailMessage:
    link = email_link("reset-password", {"token": token}, locale)
    body = (
        f"A password reset was requested for your account.\n\n"
        f"Reset your password: {link}\n\n"
        f"This link expires in {ttl_minutes} minutes. Ignore this email if you did not ask for it.\n"
    )
    return EmailMessage(email, _subject("password_reset", locale), body)


def comment_report_notice(email: str, username: str, comment: str, reason: str, locale: str = "en") -> EmailMessage:
    body = (
        f"Hi {username},\n\n"
        f"Your comment was reported by another reader for: {reason.replace('_', ' ')}.\n\n"
        f"\"{comment}\"\n\n"
        f"Please review our community guidelines. Repeated reports may lead to removal.\n"
    )
    return EmailMessage(email, _subject("comment_report", locale), body)


def newsletter_digest(
    email: str,
    unsubscribe_token: str | None,
    articles: list[tuple[str, str]],
    locale: str = "en",
) -> EmailMessage:
    """Digest of (title, url) pairs with an unsubscribe link."""
    lines = [f"- {title}: {url}" for title, url in articles]
    params = {"email": email}
    if unsubscribe_token:
        params["token"] = unsubscribe_token
    unsubscribe = email_link("unsubscribe", params, locale)
    body = "Latest articles:\n\n" + "\n".join(lines) + f"\n\nUnsubscribe: {unsubscribe}\n"
    return EmailMessage(email, _subject("newsletter", locale), body)
