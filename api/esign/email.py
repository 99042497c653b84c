import logging
import os
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from html import escape

logger = logging.getLogger(__name__)

SMTP_HOST = os.getenv("EMAIL_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("EMAIL_PORT", "587"))
SMTP_USER = os.getenv("EMAIL_USER")
SMTP_PASSWORD = os.getenv("EMAIL_PASSWORD")
DEFAULT_SENDER = os.getenv("EMAIL_SENDER", SMTP_USER or "noreply@example.com")
DEFAULT_SENDER_NAME = os.getenv("EMAIL_SENDER_NAME", "Document Signing")

def format_sender_name(requester_name: str | None = None) -> str:
    base_label = (DEFAULT_SENDER_NAME or "Document Signing").strip() or "Document Signing"
    if requester_name:
        plain = requester_name.strip()
        if plain:
            return f"{plain} via {base_label}"
    return base_label

def render_signature_request(signer_name: str, document_name: str, message: str, link: str, field_count: int):
    subject = f"Signature Requested: {document_name}"
    intro = message.strip() or f"You have been invited to review and sign {document_name}."
    plural = "s" if field_count != 1 else ""
    text_body = f"""Hi {signer_name},

{intro}

Document: “{document_name}” ({field_count} field{plural} to complete)

Open document: {link}
"""
    link_html = escape(link)
    html_body = f"""
<html>
  <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; background: #f5f6f8; padding: 24px;">
    <div style="max-width: 520px; margin: 0 auto; background: #ffffff; border-radius: 12px; padding: 24px;">
      <h2 style="margin-top: 0; font-size: 20px; color: #0f172a;">Signature requested</h2>
      <p style="font-size: 14px; color: #1e293b;">Hi {escape(signer_name)},</p>
      <p style="font-size: 14px; color: #1e293b; line-height: 1.5; white-space: pre-line;">{escape(intro)}</p>
      <p style="font-size: 13px; color: #475569;">{escape(document_name)} · {field_count} field{plural} to complete</p>
      <div style="margin: 24px 0;">
        <a href="{link_html}" style="display: inline-block; background: #2563eb; color: #fff; padding: 12px 24px; border-radius: 999px; text-decoration: none; font-weight: 600;">
          Review &amp; Sign
        </a>
      </div>
      <p style="font-size: 12px; color: #64748b;">If the button doesn&apos;t work, copy this link into your browser:<br /><a href="{link_html}">{link_html}</a></p>
    </div>
  </body>
</html>
"""
    return subject, text_body, html_body

def send_email(
    to: str,
    subject: str,
    body: str,
    html_body: str | None = None,
    sender_name: str | None = None,
    reply_to: str | None = None,
):
    display_name = (sender_name or DEFAULT_SENDER_NAME).strip()
    from_value = formataddr((display_name, DEFAULT_SENDER)) if display_name else DEFAULT_SENDER
    if SMTP_USER and SMTP_PASSWORD:
        msg = EmailMessage()
        msg["From"] = from_value
        if reply_to:
            msg["Reply-To"] = reply_to
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body or "")
        if html_body:
            msg.add_alternative(html_body, subtype="html")
        with smtplib.SMTP(SMTP_HOST, SMTP_PORT) as smtp:
            smtp.starttls()
            smtp.login(SMTP_USER, SMTP_PASSWORD)
            smtp.send_message(msg)
        logger.info("sent email to %s: %s", to, subject)
    else:
        print(f"""
--- EMAIL (stub) ---
From: {from_value}
Reply-To: {reply_to or "(not set)"}
To: {to}
Subject: {subject}

{body}
--------------------
""")
