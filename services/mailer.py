# services/mailer.py

import logging
import mimetypes
import os
import smtplib
import ssl
from email.message import EmailMessage

from core.config import smtp_settings
from core.engine import format_usd
from core.models import Itinerary, PropertyConfig

logger = logging.getLogger(__name__)


def build_message(
    recipient_email: str,
    itin: Itinerary,
    prop: PropertyConfig,
    sender: str,
) -> EmailMessage:
    lines = "\n".join(
        f" {i.label:<20} {format_usd(i.amount):>8}   {i.note}" for i in itin.line_items
    )
    body = f"""Hello,

Here is the beach itinerary you saved for {prop.name}
({prop.address}, {prop.dates_label}):

{lines}

 {'Estimated total':<20} {format_usd(itin.total):>8}

Plans can be updated anytime before arrival.

See you on the sand,
{prop.brand}
"""
    msg = EmailMessage()
    msg["Subject"] = f"Your beach itinerary – {prop.name}"
    msg["From"] = sender
    msg["To"] = recipient_email
    msg.set_content(body)
    return msg


def send_itinerary_email(
    recipient_email: str,
    itin: Itinerary,
    prop: PropertyConfig,
    attachment_path: str | None = None,
) -> None:
    """
    Envoie le récapitulatif de l'itinéraire par SMTP (STARTTLS).
    L'adresse n'est pas validée : elle est transmise telle quelle au serveur.
    """
    cfg = smtp_settings()
    if not cfg.configured:
        raise RuntimeError("❌ SMTP_* non configurées.")

    msg = build_message(recipient_email, itin, prop, cfg.sender)

    if attachment_path and os.path.exists(attachment_path):
        ctype, _ = mimetypes.guess_type(attachment_path)
        maintype, subtype = (ctype.split("/", 1) if ctype else ("application", "octet-stream"))
        with open(attachment_path, "rb") as f:
            msg.add_attachment(
                f.read(),
                maintype=maintype,
                subtype=subtype,
                filename=os.path.basename(attachment_path),
            )

    context = ssl.create_default_context()
    with smtplib.SMTP(cfg.host, cfg.port) as s:
        s.starttls(context=context)
        s.login(cfg.user, cfg.password)
        s.send_message(msg)
    logger.info("itinerary (%s) emailed to %s", format_usd(itin.total), recipient_email)
