import uuid
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.services.admin_notifications import (
    NewOrderPayload,
    ProjectRequestPayload,
    ReturnHandoverPayload,
    ReturnRequestPayload,
)
from app.services import customer_emails
from app.services.admin_notifications.templates import render_email


def test_new_order_email():
    order_id = uuid.uuid4()
    order = SimpleNamespace(
        id=order_id,
        order_number="SKY-20260310-0001",
        total_amount=Decimal("4999.00"),
        items=[{"name": "Quad Drone", "quantity": 1}],
        created_at=datetime(2026, 3, 10, tzinfo=timezone.utc),
    )
    user = SimpleNamespace(name="Asha", email="asha@example.com")
    payload = NewOrderPayload.from_order(order, user)

    subject, html, text = render_email(payload)

    assert subject == "New Order Received - SKY-20260310-0001"
    assert "Quad Drone x 1" in text
    assert f"/admin/orders/{order_id}" in html
    assert payload.wall_message().message == "Order SKY-20260310-0001 has been placed by Asha"


def test_guest_order_wall_message():
    payload = NewOrderPayload(
        order_id=uuid.uuid4(),
        order_number="SKY-20260310-0002",
        customer_name=None,
        customer_email=None,
        total_amount=Decimal("10"),
    )
    assert payload.wall_message().message.endswith("by Guest")


def test_return_request_email_escapes_customer_text():
    payload = ReturnRequestPayload(
        return_request_id=uuid.uuid4(),
        request_number=2,
        order_id=uuid.uuid4(),
        order_number="SKY-20260310-0003",
        customer_name="Asha",
        reason="wrong_item",
        condition="fair",
        description="<script>alert(1)</script> box was empty",
    )

    subject, html, text = render_email(payload)

    assert subject == "Return Request Received - Order SKY-20260310-0003"
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "wrong item" in text


def test_project_request_email_and_wall():
    service_request = SimpleNamespace(
        id=uuid.uuid4(),
        request_number="SR-20260310-0001",
        service_type="drone-services",
        project_type="Crop survey drone",
        name="Ravi",
        email="ravi@example.com",
        phone=None,
        budget="50k-1L",
        timeline=None,
        description="Need a survey drone for 20 acres.",
    )
    payload = ProjectRequestPayload.from_service_request(service_request)

    subject, _, text = render_email(payload)

    assert subject == "New Project Request - Crop survey drone"
    assert "Phone: -" in text
    assert payload.wall_message().action_url == f"/admin/projects/{service_request.id}"


def test_handover_wall_message_links_to_order():
    order_id = uuid.uuid4()
    handed_over_at = datetime(2026, 3, 12, 9, 30, tzinfo=timezone.utc)
    payload = ReturnHandoverPayload(
        return_request_id=uuid.uuid4(),
        order_id=order_id,
        order_number="SKY-20260310-0004",
        customer_name="Asha",
        handed_over_at=handed_over_at,
    )

    subject, _, _ = render_email(payload)
    wall = payload.wall_message()

    assert subject == "Return Item Handed Over - SKY-20260310-0004"
    assert wall.action_url == f"/admin/orders/{order_id}"
    assert wall.data["handedOverAt"] == handed_over_at.isoformat()


def customer_order():
    return SimpleNamespace(
        id=uuid.uuid4(),
        order_number="SKY-20260310-0009",
        total_amount=Decimal("650.00"),
        items=[{"name": "Uno Board", "quantity": 2}],
    )


def test_customer_status_update_email():
    order = customer_order()
    user = SimpleNamespace(name="Asha", email="asha@example.com")

    message = customer_emails.order_status_update(order, user, "shipped")

    assert message.to_email == "asha@example.com"
    assert message.subject == "Order #SKY-20260310-0009 Status Update - Shipped"
    assert "on its way" in message.text
    assert f"/orders/{order.id}" in message.html
    assert "configured admin recipient" not in message.html


def test_return_decision_email_escapes_admin_notes():
    request = SimpleNamespace(
        id=uuid.uuid4(),
        request_number=1,
        status="rejected",
        reason="changed_mind",
        description="No longer needed",
        admin_notes="<b>Outside policy</b>",
    )
    user = SimpleNamespace(name="Asha", email="asha@example.com")

    message = customer_emails.return_decision(request, customer_order(), user)

    assert message.subject == "Return Request Status - Order SKY-20260310-0009"
    assert "Changed Mind" in message.text
    assert "&lt;b&gt;Outside policy&lt;/b&gt;" in message.html


def test_return_decision_email_needs_a_decision():
    request = SimpleNamespace(
        id=uuid.uuid4(), request_number=1, status="pending",
        reason="defective", description="Dead on arrival", admin_notes=None,
    )
    with pytest.raises(ValueError):
        customer_emails.return_decision(request, customer_order(), SimpleNamespace(name="Asha", email="a@example.com"))
