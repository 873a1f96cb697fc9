from fastapi import APIRouter, Depends, Request

from shared.security import AuthUser, get_current_user

from .commands import CreateUser, UpdateLastIp, UpdateTrainingBalance
from .queries import GetUser
from .schemas import BalanceResponse, BalanceUpdate, UserCreate, UserResponse

router = APIRouter()


def get_application(request: Request):
    return request.app.state.application


@router.get("/users/me", response_model=UserResponse)
async def get_current_user_profile(
    request: Request,
    user: AuthUser = Depends(get_current_user),
    app=Depends(get_application),
):
    if request.client and request.client.host:
        await app.commands.update_last_ip.handle(UpdateLastIp(user_uuid=user.uuid, ip=request.client.host))

    stored = await app.queries.get_user.handle(GetUser(user_uuid=user.uuid))
    return UserResponse(
        display_name=user.display_name or stored.name,
        balance=stored.balance,
        role=user.role,
    )


# Service-to-service endpoints.

@router.post("/internal/users", status_code=201, response_model=BalanceResponse)
async def create_user(data: UserCreate, app=Depends(get_application)):
    await app.commands.create_user.handle(CreateUser(
        user_uuid=data.uuid,
        user_type=data.user_type,
        name=data.name,
        email=data.email,
        balance=data.balance,
    ))
    return BalanceResponse(uuid=data.uuid, balance=data.balance)


@router.get("/internal/users/{user_uuid}/balance", response_model=BalanceResponse)
async def get_balance(user_uuid: str, app=Depends(get_application)):
    stored = await app.queries.get_user.handle(GetUser(user_uuid=user_uuid))
    return BalanceResponse(uuid=stored.uuid, balance=stored.balance)


@router.post("/internal/users/{user_uuid}/balance", response_model=BalanceResponse)
async def update_balance(user_uuid: str, data: BalanceUpdate, app=Depends(get_application)):
    await app.commands.update_training_balance.handle(UpdateTrainingBalance(
        user_uuid=user_uuid,
        amount_change=data.amount_change,
        idempotency_key=data.idempotency_key,
    ))
    stored = await app.queries.get_user.handle(GetUser(user_uuid=user_uuid))
    return BalanceResponse(uuid=stored.uuid, balance=stored.balance)
