from typing import Literal, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from buildup.auth import create_access_token, verify_token
from buildup.config import Settings, get_settings
from buildup.database import get_db
from buildup.payments import confirm_payment, create_order
from buildup.razorpay_service import RazorpayProvider, get_provider
from buildup.users import authenticate_user, get_active_user, provision_user

router = APIRouter()


class CreateOrderRequest(BaseModel):
    plan: str
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: Optional[Union[str, int]] = None

    @field_validator("phone")
    @classmethod
    def phone_as_text(cls, value):
        return None if value is None else str(value)


class VerifyPaymentRequest(BaseModel):
    razorpay_payment_id: str
    razorpay_order_id: str
    razorpay_signature: str


class Profile(BaseModel):
    height: Optional[float] = None      # cm
    weight: Optional[float] = None      # kg
    age: Optional[int] = None
    gender: Literal["male", "female", "other"] = "male"
    goal: Literal["lose", "maintain", "gain"] = "maintain"


class CreateUserRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str
    plan: str
    profile: Profile = Field(default_factory=Profile)


class LoginRequest(BaseModel):
    email: str
    password: str


@router.post("/payment/create")
def create_payment_api(
    request: CreateOrderRequest,
    db: Session = Depends(get_db),
    provider: RazorpayProvider = Depends(get_provider),
):
    order, provider_order = create_order(
        db, provider, request.plan, request.name, request.email, request.phone
    )
    return {
        "success": True,
        "order": {**provider_order.model_dump(), "key_id": provider.key_id},
        "amount": order.amount,
    }


@router.post("/payment/verify")
def verify_payment_api(
    request: VerifyPaymentRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    order = confirm_payment(
        db,
        request.razorpay_order_id,
        request.razorpay_payment_id,
        request.razorpay_signature,
        settings.key_secret,
    )
    return {
        "success": True,
        "message": "Payment verified successfully",
        "payment": order.to_public(),
    }


@router.post("/user/create", status_code=201)
def create_user_api(request: CreateUserRequest, db: Session = Depends(get_db)):
    user = provision_user(
        db, request.email, request.password, request.plan, request.profile.model_dump()
    )
    return {"success": True, "user": user.to_public()}


@router.post("/user/login")
def login_api(
    request: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = authenticate_user(db, request.email, request.password)
    return {
        "success": True,
        "user": user.to_public(),
        "token": create_access_token(user, settings),
    }


@router.get("/user/profile")
def profile_api(claims: dict = Depends(verify_token), db: Session = Depends(get_db)):
    user = get_active_user(db, claims["sub"])
    return {
        "success": True,
        "profile": {
            "name": user.name,
            "email": user.email,
            "membership": user.membership_plan,
            "endDate": user.membership_end.isoformat(),
            "profile": user.profile,
        },
    }
