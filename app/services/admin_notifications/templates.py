"""HTML and plain-text bodies for admin notification emails."""
from html import escape
from typing import List, Optional, Tuple

from app.config import settings
from app.services.admin_notifications.events import (
    EventType,
    NewOrderPayload,
    ReturnRequestPayload,
    ProjectRequestPayload,
    ReturnHandoverPayload,
)

ADMIN_FOOTER = "You receive this because you are a configured admin recipient."


def _layout(
    heading: str,
    rows: List[Tuple[str, str]],
    action_path: str,
    intro: str,
    button_label: str,
    footer: str,
) -> str:
    action_url = f"{settings.FRONTEND_URL.rstrip('/')}{action_path}"
    table = "\n".join(
        f"<tr><td class=\"label\">{escape(label)}</td><td>{escape(str(value))}</td></tr>"
        for label, value in rows
    )
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ background: #0f172a; color: white; padding: 20px; text-align: center; }}
            .content {{ padding: 30px; background: #f9f9f9; }}
            .label {{ font-weight: bold; padding-right: 16px; vertical-align: top; }}
            .button {{ display: inline-block; padding: 12px 30px; background: #2563eb; color: white; text-decoration: none; border-radius: 5px; margin: 20px 0; }}
            .footer {{ padding: 20px; text-align: center; color: #666; font-size: 12px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>{escape(settings.SMTP_FROM_NAME)}</h1>
            </div>
            <div class="content">
                <h2>{escape(heading)}</h2>
                <p>{escape(intro)}</p>
                <table>
                {table}
                </table>
                <p style="text-align: center;">
                    <a href="{action_url}" class="button">{escape(button_label)}</a>
                </p>
            </div>
            <div class="footer">
                <p>{escape(footer)}</p>
            </div>
        </div>
    </body>
    </html>
    """


def _text(heading: str, rows: List[Tuple[str, str]], action_path: str) -> str:
    lines = [heading, ""]
    lines.extend(f"{label}: {value}" for label, value in rows)
    lines.extend(["", f"{settings.FRONTEND_URL.rstrip('/')}{action_path}"])
    return "\n".join(lines)


def _new_order(payload: NewOrderPayload):
    rows = [
        ("Order", payload.order_number),
        ("Customer", payload.customer_name or "Guest"),
        ("Email", payload.customer_email or "-"),
        ("Total", f"₹{payload.total_amount}"),
    ]
    for item in payload.items:
        rows.append(("Item", f"{item.get('name')} x {item.get('quantity')}"))
    return "New Order Received", rows, "A new order has been placed."


def _return_request(payload: ReturnRequestPayload):
    rows = [
        ("Order", payload.order_number),
        ("Request", f"#{payload.request_number}"),
        ("Customer", payload.customer_name or "-"),
        ("Reason", payload.reason.replace("_", " ")),
        ("Condition", payload.condition),
        ("Description", payload.description),
    ]
    return "Return Request Received", rows, "A customer has requested a return."


def _project_request(payload: ProjectRequestPayload):
    rows = [
        ("Request", payload.request_number),
        ("Service", payload.service_type),
        ("Project", payload.title),
        ("Name", payload.customer_name),
        ("Email", payload.customer_email),
        ("Phone", payload.phone or "-"),
        ("Budget", payload.budget or "-"),
        ("Timeline", payload.timeline or "-"),
        ("Description", payload.description),
    ]
    return "New Project Request", rows, "A new project request was submitted."


def _return_handover(payload: ReturnHandoverPayload):
    rows = [
        ("Order", payload.order_number),
        ("Customer", payload.customer_name or "-"),
        ("Handed over", payload.handed_over_at.isoformat() if payload.handed_over_at else "-"),
        ("Pickup date", payload.pickup_date.isoformat() if payload.pickup_date else "-"),
    ]
    return "Return Item Handed Over", rows, "The customer marked the return item as handed over."


_BUILDERS = {
    EventType.NEW_ORDER: _new_order,
    EventType.RETURN_REQUEST: _return_request,
    EventType.PROJECT_REQUEST: _project_request,
    EventType.RETURN_HANDOVER: _return_handover,
}


def render_message(
    heading: str,
    rows: List[Tuple[str, str]],
    action_path: str,
    intro: str,
    button_label: str = "Open in Admin Console",
    footer: Optional[str] = None,
) -> Tuple[str, str]:
    """Return (html, text) in the shared layout; used for customer emails too."""
    html = _layout(heading, rows, action_path, intro, button_label, footer or ADMIN_FOOTER)
    return html, _text(heading, rows, action_path)


def render_email(payload) -> Tuple[str, str, str]:
    """Return (subject, html, text) for an event payload."""
    heading, rows, intro = _BUILDERS[payload.event_type](payload)
    html, text = render_message(heading, rows, payload.wall_message().action_url, intro)
    return payload.email_subject(), html, text
