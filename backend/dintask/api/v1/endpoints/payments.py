"""
RAZORPAY PAYMENT INTEGRATION
============================
Plan purchase for tenant admins.

Flow:
1. Admin picks a plan -> /payments/create-order -> Razorpay order (free plans activate directly)
2. Frontend opens Razorpay checkout with the order id
3. Frontend calls /payments/verify -> signature check, payment marked paid, plan activated
4. /payments/history and /payments/invoice/{id} for receipts
"""

from datetime import datetime
from typing import Optional

import razorpay
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from dintask.core.config import settings
from dintask.core.database import get_db
from dintask.core.exceptions import AuthorizationError, PaymentError, ResourceNotFoundError, ValidationError
from dintask.core.logging_config import logger
from dintask.core.security import verify_razorpay_signature
from dintask.models.accounts import Admin, SubscriptionStatus
from dintask.models.billing import Payment, PaymentStatus, Plan
from dintask.modules.auth.dependencies import WorkspaceScope, authorize, get_workspace
from dintask.modules.auth.roles import ADMIN, SUPERADMIN, SUPERADMIN_STAFF
from dintask.modules.auth.subscription import activate_plan
from dintask.schemas.billing import CreateOrderRequest, PaymentOut, VerifyPaymentRequest
from dintask.services.invoice_generator import invoice_generator

router = APIRouter()

_razorpay_client: Optional[razorpay.Client] = None


def get_razorpay_client() -> razorpay.Client:
    global _razorpay_client
    if _razorpay_client is None:
        if not (settings.RAZORPAY_KEY_ID and settings.RAZORPAY_KEY_SECRET):
            raise PaymentError("Payment service not configured. Please contact support.")
        _razorpay_client = razorpay.Client(
            auth=(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET)
        )
    return _razorpay_client


@router.post("/create-order")
async def create_order(
    data: CreateOrderRequest,
    current_user=Depends(authorize(ADMIN)),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    """
    Step 1 of the payment flow.

    Free plans are activated on the spot unless already running; paid plans get a Razorpay order
    (amount in paise) and a pending Payment row.
    """
    plan = await db.get(Plan, data.plan_id)
    if not plan:
        raise ResourceNotFoundError("Plan")

    if plan.is_free:
        if (
            current_user.subscription_plan_id == plan.id
            and current_user.subscription_status == SubscriptionStatus.ACTIVE
            and not current_user.subscription_expired()
        ):
            raise ValidationError(f"You are already on the {plan.name} plan")
        activate_plan(current_user, plan)
        await db.commit()
        return {"success": True, "message": "Free plan activated successfully", "free": True}

    order_data = {
        "amount": int(round(plan.price * 100)),
        "currency": settings.PAYMENT_CURRENCY,
        "receipt": f"receipt_{int(datetime.utcnow().timestamp() * 1000)}",
        "notes": {"admin_id": str(current_user.id), "plan": plan.name},
    }
    client = get_razorpay_client()
    try:
        order = await run_in_threadpool(client.order.create, data=order_data)
    except Exception as e:
        logger.error(f"[Payment] Order creation failed: {e}")
        raise PaymentError("Failed to create Razorpay order")

    logger.info(f"[Payment] Created Razorpay order: {order['id']} for admin {current_user.id}")

    db.add(Payment(
        admin_id=current_user.id,
        plan_id=plan.id,
        razorpay_order_id=order["id"],
        amount=plan.price,
        currency=settings.PAYMENT_CURRENCY,
        status=PaymentStatus.CREATED,
    ))
    await db.commit()

    return {
        "success": True,
        "data": order,
        "keyId": settings.RAZORPAY_KEY_ID,
    }


@router.post("/verify")
async def verify_payment(
    data: VerifyPaymentRequest,
    current_user=Depends(authorize(ADMIN)),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    """Step 3: check the checkout signature, mark paid and activate the plan in one commit"""
    if not verify_razorpay_signature(data.razorpay_order_id, data.razorpay_payment_id, data.razorpay_signature):
        logger.warning(f"[Payment] Invalid signature for order {data.razorpay_order_id}")
        raise PaymentError("Invalid signature")

    result = await db.execute(
        select(Payment).where(Payment.razorpay_order_id == data.razorpay_order_id)
    )
    payment = result.scalars().first()
    if not payment:
        raise ResourceNotFoundError("Payment record")
    if not scope.owns(payment):
        raise AuthorizationError("Not authorized to verify this payment")
    if payment.status == PaymentStatus.PAID:
        raise ValidationError("Payment already verified")

    payment.razorpay_payment_id = data.razorpay_payment_id
    payment.razorpay_signature = data.razorpay_signature
    payment.status = PaymentStatus.PAID

    admin = await db.get(Admin, payment.admin_id)
    plan = await db.get(Plan, payment.plan_id)
    if admin and plan:
        activate_plan(admin, plan)

    await db.commit()
    logger.log_tenant_event("payment_verified", payment.admin_id, order_id=payment.razorpay_order_id)
    return {"success": True, "message": "Payment verified and plan updated successfully"}


@router.get("/history")
async def billing_history(
    current_user=Depends(authorize(ADMIN)),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(Payment)
        .where(Payment.admin_id == current_user.id)
        .order_by(Payment.created_at.desc())
    )
    payments = result.unique().scalars().all()
    return {"success": True, "count": len(payments), "data": [PaymentOut.model_validate(p) for p in payments]}


@router.get("/invoice/{payment_id}")
async def download_invoice(
    payment_id: str,
    current_user=Depends(authorize(ADMIN, SUPERADMIN, SUPERADMIN_STAFF)),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    payment = await scope.get_or_404(db, Payment, payment_id, "Payment")
    pdf = await run_in_threadpool(invoice_generator.generate, payment)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=invoice_{payment.razorpay_order_id}.pdf"},
    )
