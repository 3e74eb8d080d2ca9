from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, get_current_user, get_payment_gateway
from app.models.user import User
from app.schemas.payment import OrderCreate, OrderOut, PaymentResult, PaymentVerify
from app.services.notifications import notify_admins
from app.services.payments import confirm_payment, create_order
from app.utils.razorpay_client import RazorpayGateway

router = APIRouter(prefix="/payments", tags=["Payments"])


# ---------------------------------------------------------------------
# CREATE ORDER
# ---------------------------------------------------------------------
@router.post("/create-order", response_model=OrderOut)
def create_payment_order(
    data: OrderCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
):
    order = create_order(db, gateway, data.booking_id, user.id)
    return OrderOut(
        order_id=order.order_id,
        amount=order.amount,
        currency=order.currency,
        key_id=order.key_id,
    )


# ---------------------------------------------------------------------
# VERIFY PAYMENT
# ---------------------------------------------------------------------
@router.post("/verify", response_model=PaymentResult)
def verify_payment(
    data: PaymentVerify,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
):
    result = confirm_payment(
        db,
        gateway,
        booking_id=data.booking_id,
        order_id=data.razorpay_order_id,
        payment_id=data.razorpay_payment_id,
        signature=data.razorpay_signature,
    )

    if not result.already_processed:
        background_tasks.add_task(
            notify_admins,
            type="payment",
            title="Payment Received",
            content="A new payment has been made. For details, please check your admin dashboard.",
            booking_id=data.booking_id,
            meta={"amount": result.amount, "method": result.method},
        )

    return PaymentResult(success=result.success, method=result.method, amount=result.amount)
