"""
Email templates — remodel_intake/notifications/templates.py
Renderers for the four notification emails.

Inputs must already be sanitized (see remodel_intake/sanitize.py); nothing in
this module escapes again or performs I/O. Each renderer returns the subject
plus an HTML and a plain-text rendition carrying the same information.
"""
from __future__ import annotations

import html as _html
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

COMPANY_NAME = os.getenv("COMPANY_NAME", "Rhino Remodeler")
COMPANY_PHONE = os.getenv("COMPANY_PHONE", "(206) 487-9677")
COMPANY_WEBSITE = os.getenv("COMPANY_WEBSITE", "https://rhinoremodeler.com")
COMPANY_LOCATION = os.getenv("COMPANY_LOCATION", "Kent, WA")

NEXT_STEPS = (
    "Our team will review your request within 24-48 hours",
    "We'll contact you to discuss your project",
    "We'll schedule a free consultation at your convenience",
    "You'll receive a detailed, transparent quote",
)


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


def _digits(value: str) -> str:
    return "".join(ch for ch in value if ch.isdigit())


def _plain(value: str) -> str:
    """Plain-text parts and subjects carry the raw characters, not entities."""
    return _html.unescape(value.replace("<br>", "\n"))


def _location(city: str, state: str) -> str:
    return f"{city or 'N/A'}, {state or 'N/A'}"


def _document(body: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        '<head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0"></head>\n'
        '<body style="margin: 0; padding: 0; background-color: #f4f4f4;">\n'
        f"{body}\n"
        "</body>\n"
        "</html>"
    )


# ---------------------------------------------------------------------------
# Quote: customer confirmation
# ---------------------------------------------------------------------------

def render_quote_customer_email(
    *,
    customer_name: str,
    tracking_id: str,
    service: str,
    city: str,
    state: str,
    email: str,
    phone: Optional[str] = None,
    image_count: int = 0,
) -> RenderedEmail:
    subject = f"Quote Request Received - {tracking_id}"
    location = _location(city, state)
    reach = f"<strong>{email}</strong>" + (f" or <strong>{phone}</strong>" if phone else "")

    photo_row = ""
    if image_count > 0:
        photo_row = f"""
            <tr>
              <td style="padding: 8px 0; font-weight: bold; color: #555;">Photos:</td>
              <td style="padding: 8px 0; color: #333;">{image_count} photo(s) uploaded</td>
            </tr>"""

    steps_html = "\n".join(
        [
            f"          <li>Our team will review your request within <strong>24-48 hours</strong></li>",
            f"          <li>We'll contact you at {reach} to discuss your project</li>",
            f"          <li>{NEXT_STEPS[2]}</li>",
            f"          <li>{NEXT_STEPS[3]}</li>",
        ]
    )

    html = _document(f"""
  <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; background: #ffffff;">
    <div style="background: #1a1a2e; color: white; padding: 30px; text-align: center;">
      <h1 style="margin: 0; font-size: 24px;">{COMPANY_NAME}</h1>
      <p style="margin: 10px 0 0 0; opacity: 0.9;">Quote Request Received</p>
    </div>
    <div style="padding: 30px;">
      <h2 style="color: #333; margin-top: 0;">Hi {customer_name},</h2>
      <p style="color: #555; line-height: 1.6;">
        Thank you for your interest in {COMPANY_NAME}! We've received your quote request and our team is reviewing it now.
      </p>
      <div style="background: #f8f9fa; border-radius: 8px; padding: 20px; margin: 20px 0;">
        <h3 style="color: #333; margin-top: 0; border-bottom: 2px solid #e74c3c; padding-bottom: 10px;">Your Request Summary</h3>
        <table style="width: 100%; border-collapse: collapse;">
            <tr>
              <td style="padding: 8px 0; font-weight: bold; color: #555; width: 120px;">Reference ID:</td>
              <td style="padding: 8px 0; color: #e74c3c; font-weight: bold;">{tracking_id}</td>
            </tr>
            <tr>
              <td style="padding: 8px 0; font-weight: bold; color: #555;">Service:</td>
              <td style="padding: 8px 0; color: #333;">{service}</td>
            </tr>
            <tr>
              <td style="padding: 8px 0; font-weight: bold; color: #555;">Location:</td>
              <td style="padding: 8px 0; color: #333;">{location}</td>
            </tr>{photo_row}
        </table>
      </div>
      <h3 style="color: #333;">What Happens Next?</h3>
      <ol style="color: #555; line-height: 1.8; padding-left: 20px;">
{steps_html}
      </ol>
      <div style="background: #e74c3c; color: white; padding: 15px 20px; border-radius: 8px; margin: 25px 0; text-align: center;">
        <p style="margin: 0; font-size: 14px;">Questions? Call us at</p>
        <p style="margin: 5px 0 0 0; font-size: 20px; font-weight: bold;">{COMPANY_PHONE}</p>
      </div>
      <p style="color: #555; margin-bottom: 0;">Best regards,<br><strong style="color: #333;">The {COMPANY_NAME} Team</strong></p>
    </div>
    <div style="background: #333; color: #999; padding: 20px; text-align: center; font-size: 12px;">
      <p style="margin: 0;">{COMPANY_NAME} | {COMPANY_LOCATION}</p>
      <p style="margin: 10px 0 0 0;"><a href="{COMPANY_WEBSITE}" style="color: #e74c3c; text-decoration: none;">Visit our website</a></p>
    </div>
  </div>""")

    contact_line = email + (f" or {phone}" if phone else "")
    lines = [
        f"Hi {customer_name},",
        "",
        f"Thank you for your interest in {COMPANY_NAME}! We've received your quote request "
        "and our team is reviewing it now.",
        "",
        "YOUR REQUEST SUMMARY",
        f"Reference ID: {tracking_id}",
        f"Service: {service}",
        f"Location: {location}",
    ]
    if image_count > 0:
        lines.append(f"Photos: {image_count} photo(s) uploaded")
    lines += [
        "",
        "WHAT HAPPENS NEXT?",
        f"1. {NEXT_STEPS[0]}",
        f"2. We'll contact you at {contact_line} to discuss your project",
        f"3. {NEXT_STEPS[2]}",
        f"4. {NEXT_STEPS[3]}",
        "",
        f"Questions? Call us at {COMPANY_PHONE}",
        "",
        "Best regards,",
        f"The {COMPANY_NAME} Team",
    ]
    return RenderedEmail(subject=_plain(subject), html=html, text=_plain("\n".join(lines)))


# ---------------------------------------------------------------------------
# Quote: business alert
# ---------------------------------------------------------------------------

def render_quote_business_email(
    *,
    customer_name: str,
    email: str,
    phone: str,
    service: str,
    city: str,
    state: str,
    quote_id: str,
    message: str = "",
    image_urls: Optional[list[str]] = None,
) -> RenderedEmail:
    image_urls = image_urls or []
    subject = f"New Quote Request: {service} - {customer_name}"
    location = _location(city, state)
    phone_display = phone or "Not provided"

    gallery_html = ""
    if image_urls:
        items = "".join(
            f"""
        <div style="margin-bottom: 15px;">
          <a href="{url}" target="_blank" style="display: block;">
            <img src="{url}" alt="Project photo {i}" style="max-width: 100%; height: auto; border-radius: 8px; border: 1px solid #ddd;" />
          </a>
          <p style="font-size: 12px; color: #666; margin: 5px 0 0 0;">Photo {i} - <a href="{url}" target="_blank" style="color: #e74c3c;">View full size</a></p>
        </div>"""
            for i, url in enumerate(image_urls, start=1)
        )
        gallery_html = f"""
      <h3 style="color: #333; margin-top: 20px;">Project Photos ({len(image_urls)}):</h3>
      <div style="background: #fff; padding: 15px;">{items}
      </div>"""

    message_html = ""
    if message:
        message_html = f"""
      <h3 style="color: #333; margin-top: 20px;">Message:</h3>
      <div style="background: #fff; padding: 15px; border-left: 4px solid #e74c3c;">
        {message}
      </div>"""

    html = _document(f"""
  <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <div style="background: #1a1a2e; color: white; padding: 20px; text-align: center;">
      <h1 style="margin: 0;">New Quote Request</h1>
    </div>
    <div style="padding: 20px; background: #f9f9f9;">
      <h2 style="color: #333; border-bottom: 2px solid #e74c3c; padding-bottom: 10px;">Customer Information</h2>
      <table style="width: 100%; border-collapse: collapse;">
        <tr><td style="padding: 10px; font-weight: bold; width: 140px;">Name:</td><td style="padding: 10px;">{customer_name}</td></tr>
        <tr style="background: #fff;"><td style="padding: 10px; font-weight: bold;">Email:</td><td style="padding: 10px;"><a href="mailto:{email}">{email}</a></td></tr>
        <tr><td style="padding: 10px; font-weight: bold;">Phone:</td><td style="padding: 10px;">{phone_display}</td></tr>
        <tr style="background: #fff;"><td style="padding: 10px; font-weight: bold;">Service:</td><td style="padding: 10px; color: #e74c3c; font-weight: bold;">{service}</td></tr>
        <tr><td style="padding: 10px; font-weight: bold;">Location:</td><td style="padding: 10px;">{location}</td></tr>
      </table>{message_html}{gallery_html}
      <div style="margin-top: 20px; padding: 15px; background: #e74c3c; color: white; text-align: center; border-radius: 5px;">
        <strong>Quote ID:</strong> {quote_id}
      </div>
    </div>
    <div style="background: #1a1a2e; color: #999; padding: 15px; text-align: center; font-size: 12px;">
      <p style="margin: 0;">Automated notification from {COMPANY_NAME}</p>
    </div>
  </div>""")

    lines = [
        "NEW QUOTE REQUEST",
        "=================",
        "",
        "CUSTOMER INFORMATION",
        f"Name: {customer_name}",
        f"Email: {email}",
        f"Phone: {phone_display}",
        f"Service: {service}",
        f"Location: {location}",
    ]
    if message:
        lines += ["", "Message:", message]
    if image_urls:
        lines += ["", f"PROJECT PHOTOS ({len(image_urls)}):"]
        lines += [f"  Photo {i}: {url}" for i, url in enumerate(image_urls, start=1)]
    lines += ["", f"Quote ID: {quote_id}", "", "---", f"Automated notification from {COMPANY_NAME}"]
    return RenderedEmail(subject=_plain(subject), html=html, text=_plain("\n".join(lines)))


# ---------------------------------------------------------------------------
# Contact: customer confirmation
# ---------------------------------------------------------------------------

def render_contact_customer_email(
    *,
    first_name: str,
    tracking_id: str,
    message: str,
    year: Optional[int] = None,
) -> RenderedEmail:
    year = year or datetime.now(timezone.utc).year
    subject = f"We received your message - {tracking_id}"
    phone_digits = _digits(COMPANY_PHONE)

    html = _document(f"""
  <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <div style="background-color: #1e3a5f; padding: 20px; text-align: center;">
      <h1 style="color: #ffffff; margin: 0;">Message Received!</h1>
    </div>
    <div style="padding: 20px; background-color: #f9f9f9;">
      <p>Hi {first_name},</p>
      <p>Thank you for contacting <strong>{COMPANY_NAME}</strong>. We've received your message and will get back to you within 24 hours.</p>
      <div style="background-color: #ffffff; padding: 15px; border-radius: 8px; margin: 20px 0; border-left: 4px solid #f97316;">
        <p style="margin: 0 0 10px 0; color: #666; font-size: 14px;">Your Reference ID:</p>
        <p style="margin: 0; font-size: 18px; font-weight: bold; color: #1e3a5f;">{tracking_id}</p>
      </div>
      <h3 style="color: #1e3a5f;">Your Message Summary:</h3>
      <p style="background-color: #ffffff; padding: 15px; border-radius: 8px;">{message}</p>
      <p style="margin-top: 20px;">If you have any urgent questions, feel free to call us at <a href="tel:{phone_digits}">{COMPANY_PHONE}</a>.</p>
      <p>Best regards,<br><strong>The {COMPANY_NAME} Team</strong></p>
    </div>
    <div style="background-color: #1e3a5f; padding: 15px; text-align: center;">
      <p style="color: #ffffff; margin: 0; font-size: 12px;">&copy; {year} {COMPANY_NAME} | {COMPANY_LOCATION}</p>
    </div>
  </div>""")

    text = "\n".join([
        f"Hi {first_name},",
        "",
        f"Thank you for contacting {COMPANY_NAME}. We've received your message "
        "and will get back to you within 24 hours.",
        "",
        f"Your Reference ID: {tracking_id}",
        "",
        "Your Message Summary:",
        message,
        "",
        f"If you have any urgent questions, call us at {COMPANY_PHONE}.",
        "",
        "Best regards,",
        f"The {COMPANY_NAME} Team",
    ])
    return RenderedEmail(subject=_plain(subject), html=html, text=_plain(text))


# ---------------------------------------------------------------------------
# Contact: business alert
# ---------------------------------------------------------------------------

def render_contact_business_email(
    *,
    full_name: str,
    email: str,
    phone: str,
    service_label: str,
    heard_from_label: str,
    message: str,
    tracking_id: str,
) -> RenderedEmail:
    subject = f"New Contact: {full_name} - {service_label}"
    phone_digits = _digits(phone)

    html = _document(f"""
  <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <div style="background-color: #1e3a5f; padding: 20px; text-align: center;">
      <h1 style="color: #ffffff; margin: 0;">New Contact Message</h1>
    </div>
    <div style="padding: 20px; background-color: #f9f9f9;">
      <p style="color: #666; margin-bottom: 20px;">Tracking ID: <strong>{tracking_id}</strong></p>
      <h2 style="color: #1e3a5f; border-bottom: 2px solid #f97316; padding-bottom: 10px;">Contact Details</h2>
      <table style="width: 100%; border-collapse: collapse; margin-bottom: 20px;">
        <tr><td style="padding: 8px 0; color: #666;">Name:</td><td style="padding: 8px 0;"><strong>{full_name}</strong></td></tr>
        <tr><td style="padding: 8px 0; color: #666;">Email:</td><td style="padding: 8px 0;"><a href="mailto:{email}">{email}</a></td></tr>
        <tr><td style="padding: 8px 0; color: #666;">Phone:</td><td style="padding: 8px 0;"><a href="tel:{phone_digits}">{phone}</a></td></tr>
        <tr><td style="padding: 8px 0; color: #666;">Service Interest:</td><td style="padding: 8px 0;">{service_label}</td></tr>
        <tr><td style="padding: 8px 0; color: #666;">How They Found Us:</td><td style="padding: 8px 0;">{heard_from_label}</td></tr>
      </table>
      <h2 style="color: #1e3a5f; border-bottom: 2px solid #f97316; padding-bottom: 10px;">Message</h2>
      <div style="background-color: #ffffff; padding: 15px; border-radius: 8px; border-left: 4px solid #f97316;">
        <p style="margin: 0;">{message}</p>
      </div>
    </div>
    <div style="background-color: #1e3a5f; padding: 15px; text-align: center;">
      <p style="color: #ffffff; margin: 0; font-size: 12px;">{COMPANY_NAME} Contact System</p>
    </div>
  </div>""")

    text = "\n".join([
        "NEW CONTACT MESSAGE",
        "===================",
        f"Tracking ID: {tracking_id}",
        "",
        "CONTACT DETAILS",
        f"Name: {full_name}",
        f"Email: {email}",
        f"Phone: {phone}",
        f"Service Interest: {service_label}",
        f"How They Found Us: {heard_from_label}",
        "",
        "MESSAGE",
        message,
        "",
        "---",
        f"{COMPANY_NAME} Contact System",
    ])
    return RenderedEmail(subject=_plain(subject), html=html, text=_plain(text))
