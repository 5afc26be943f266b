"""
Booking lifecycle emails.
"""

from typing import Optional

from libs.common.emails.core import render_layout, send_email

STATUS_LABELS = {
    "pending": "Pending",
    "confirmed": "Confirmed",
    "processing": "Processing",
    "shipped": "Shipped",
    "ready_for_delivery": "Out for Delivery",
    "delivered": "Delivered",
    "cancelled": "Cancelled",
}


def _money(amount: float) -> str:
    return f"₹{amount:,.2f}"


async def send_booking_confirmation_email(
    to_email: str,
    customer_name: str,
    booking_code: str,
    product_name: str,
    quantity: int,
    total_price: float,
    status: str,
) -> bool:
    """
    Sent when a booking is created.
    """
    subject = f"Booking Confirmed - {booking_code}"
    body = f"""Hi {customer_name},

Thank you for your booking!

Booking: {booking_code}
Product: {product_name}
Quantity: {quantity}
Total: {_money(total_price)}
Status: {STATUS_LABELS.get(status, status)}

We'll let you know when your order moves along.
"""
    html_body = render_layout(
        "Booking Confirmed!",
        f"Booking {booking_code}",
        f"""
            <p>Hi {customer_name},</p>
            <p>Thank you for your booking!</p>
            <div class="box">
                <table>
                    <tr><th>Product</th><td>{product_name}</td></tr>
                    <tr><th>Quantity</th><td>{quantity}</td></tr>
                    <tr><th>Total</th><td>{_money(total_price)}</td></tr>
                    <tr><th>Status</th><td>{STATUS_LABELS.get(status, status)}</td></tr>
                </table>
            </div>
        """,
    )
    return await send_email(to_email, subject, body, html_body)


async def send_booking_status_email(
    to_email: str,
    customer_name: str,
    booking_code: str,
    status: str,
) -> bool:
    label = STATUS_LABELS.get(status, status)
    subject = f"Order Status Update - {booking_code}"
    body = f"""Hi {customer_name},

Your order {booking_code} is now: {label}.
"""
    html_body = render_layout(
        "Order Update",
        f"Booking {booking_code}",
        f"""
            <p>Hi {customer_name},</p>
            <p>Your order status has changed.</p>
            <div class="box"><strong>{label}</strong></div>
        """,
    )
    return await send_email(to_email, subject, body, html_body)


async def send_delivery_otp_email(to_email: str, customer_name: str, otp: str) -> bool:
    """
    Code the customer reads out to the courier at the door.
    """
    subject = "Your Delivery OTP"
    body = f"""Hi {customer_name},

Your order is at your doorstep. Share this code with the delivery person to confirm receipt:

{otp}

Do not share it before you have received your order.
"""
    html_body = render_layout(
        "Delivery Verification",
        "Share this code with your courier",
        f"""
            <p>Hi {customer_name},</p>
            <p>Share this code with the delivery person to confirm receipt:</p>
            <div class="box"><div class="code">{otp}</div></div>
            <p>Do not share it before you have received your order.</p>
        """,
    )
    return await send_email(to_email, subject, body, html_body)


def _items_table(items: list[dict]) -> tuple[str, str]:
    text = "\n".join(
        f"  - {item['name']} x{item['quantity']} - {_money(item['price'] * item['quantity'])}"
        for item in items
    )
    html = "".join(
        f"<tr><td>{item['name']}</td><td style='text-align:center'>{item['quantity']}</td>"
        f"<td style='text-align:right'>{_money(item['price'] * item['quantity'])}</td></tr>"
        for item in items
    )
    return text, html


async def send_cod_order_confirmation_email(
    to_email: str,
    customer_name: str,
    order_code: str,
    items: list[dict],  # [{"name": str, "quantity": int, "price": float}]
    total: float,
    address: str,
    phone: Optional[str] = None,
) -> bool:
    subject = f"Order Confirmed - Cash on Delivery - {order_code}"
    items_text, items_html = _items_table(items)
    body = f"""Hi {customer_name},

Your cash on delivery order has been placed.

Order: {order_code}

Items:
{items_text}

Total payable on delivery: {_money(total)}
Delivery address: {address}
{f"Phone: {phone}" if phone else ""}
"""
    html_body = render_layout(
        "Order Confirmed!",
        f"Order {order_code} - Cash on Delivery",
        f"""
            <p>Hi {customer_name},</p>
            <p>Your cash on delivery order has been placed.</p>
            <div class="box">
                <table>
                    <thead><tr><th>Item</th><th style="text-align:center">Qty</th><th style="text-align:right">Amount</th></tr></thead>
                    <tbody>{items_html}</tbody>
                </table>
                <p><strong>Total payable on delivery: {_money(total)}</strong></p>
            </div>
            <p><strong>Delivery address</strong><br/>{address}</p>
        """,
    )
    return await send_email(to_email, subject, body, html_body)


async def send_cod_order_admin_email(
    to_email: str,
    order_code: str,
    customer_name: str,
    customer_email: str,
    items: list[dict],
    total: float,
    address: str,
    phone: Optional[str] = None,
) -> bool:
    subject = f"New COD Order - {order_code}"
    items_text, items_html = _items_table(items)
    body = f"""New cash on delivery order {order_code}

Customer: {customer_name} <{customer_email}>
Phone: {phone or "-"}
Address: {address}

Items:
{items_text}

Total: {_money(total)}
"""
    html_body = render_layout(
        "New COD Order",
        f"Order {order_code}",
        f"""
            <div class="box">
                <p><strong>Customer:</strong> {customer_name} &lt;{customer_email}&gt;</p>
                <p><strong>Phone:</strong> {phone or "-"}</p>
                <p><strong>Address:</strong> {address}</p>
            </div>
            <table>
                <thead><tr><th>Item</th><th style="text-align:center">Qty</th><th style="text-align:right">Amount</th></tr></thead>
                <tbody>{items_html}</tbody>
            </table>
            <p><strong>Total: {_money(total)}</strong></p>
        """,
    )
    return await send_email(to_email, subject, body, html_body)
