"""Order confirmation template — sent once an order has been committed."""


class OrderConfirmationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        lines = [
            f"  {item['name']} x {item['quantity']}  ₹{item['price'] * item['quantity']:.2f}"
            for item in context.get("items", [])
        ]
        body = [
            f"Hi {context.get('customer_name') or 'there'},",
            "",
            f"Thank you for your order #{order_number}.",
            "",
            *lines,
            "",
            f"Subtotal: ₹{context.get('subtotal', 0.0):.2f}",
        ]
        if context.get("discount"):
            body.append(f"Discount: -₹{context['discount']:.2f}")
        shipping = context.get("shipping_charge", 0.0)
        body.append(f"Shipping: {'Free' if not shipping else f'₹{shipping:.2f}'}")
        body.append(f"Total: ₹{context.get('total', 0.0):.2f}")
        body.append(f"Payment: {context.get('payment_method', 'N/A')}")
        body.extend(["", "We'll let you know as soon as your order ships."])

        return {
            "subject": f"Order Confirmation - #{order_number}",
            "body": "\n".join(body),
        }
