# apps/htmlclient/mail.py
"""Message mail assemblé par les clients email (texte, html, images embarquées)."""
from __future__ import annotations
import logging
import mimetypes
from email.mime.image import MIMEImage
from email.utils import make_msgid
from pathlib import Path
from typing import Iterable, Optional

from django.conf import settings
from django.core.mail import EmailMultiAlternatives

log = logging.getLogger("htmlclient.mail")


class MailMessage:
    """
    Wrapper autour d'EmailMultiAlternatives.

    Les images embarquées sont attachées en `multipart/related` et référencées
    dans le html par leur Content-ID (`cid:...`).
    """

    def __init__(self, to: Iterable[str] = (), *, from_email: Optional[str] = None, subject: str = "") -> None:
        self.message = EmailMultiAlternatives(
            subject=subject,
            body="",
            from_email=from_email or getattr(settings, "DEFAULT_FROM_EMAIL", None),
            to=list(to),
        )
        self.message.mixed_subtype = "related"

    def subject(self, subject: str) -> "MailMessage":
        self.message.subject = subject
        return self

    def text(self, content: str) -> "MailMessage":
        self.message.body = content
        return self

    def html(self, content: str) -> "MailMessage":
        self.message.alternatives = [a for a in self.message.alternatives if a[1] != "text/html"]
        self.message.attach_alternative(content, "text/html")
        return self

    def embed(self, data: bytes, filename: str) -> str:
        mimetype, _ = mimetypes.guess_type(filename)
        subtype = (mimetype or "image/png").split("/", 1)[1]
        cid = make_msgid(domain="htmlclient")[1:-1]

        image = MIMEImage(data, _subtype=subtype)
        image.add_header("Content-ID", f"<{cid}>")
        image.add_header("Content-Disposition", "inline", filename=Path(filename).name)
        self.message.attach(image)
        return f"cid:{cid}"

    def send(self, fail_silently: bool = False) -> int:
        sent = self.message.send(fail_silently=fail_silently)
        log.info("mail sent to=%s subject=%r", self.message.to, self.message.subject)
        return sent
