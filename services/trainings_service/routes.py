import uuid
from dataclasses import asdict

from fastapi import APIRouter, Depends, Request

from shared.rbac import require_role
from shared.security import AuthUser, get_current_user

from .commands import (
    ApproveTrainingReschedule,
    CancelTraining,
    RejectTrainingReschedule,
    RequestTrainingReschedule,
    RescheduleTraining,
    ScheduleTraining,
)
from .domain.training import User, UserType, user_type_from_string
from .queries import AllTrainings, TrainingsForUser
from .schemas import PostTraining, PostTrainingResponse, RescheduleRequest, Training, Trainings

router = APIRouter()


def get_application(request: Request):
    return request.app.state.application


def training_user(user: AuthUser) -> User:
    return User(uuid=user.uuid, user_type=user_type_from_string(user.role))


@router.get("/trainings", response_model=Trainings)
async def get_trainings(user: AuthUser = Depends(get_current_user), app=Depends(get_application)):
    u = training_user(user)
    if u.user_type == UserType.TRAINER:
        views = await app.queries.all_trainings.handle(AllTrainings(user=u))
    else:
        views = await app.queries.trainings_for_user.handle(TrainingsForUser(user=u))
    return Trainings(trainings=[Training(**asdict(v)) for v in views])


@router.post("/trainings", status_code=201, response_model=PostTrainingResponse)
async def create_training(
    data: PostTraining,
    user: AuthUser = Depends(get_current_user),
    app=Depends(get_application),
):
    require_role(user, ["attendee"])

    training_uuid = str(uuid.uuid4())
    await app.commands.schedule_training.handle(ScheduleTraining(
        training_uuid=training_uuid,
        user_uuid=user.uuid,
        user_name=user.display_name or user.uuid,
        training_time=data.time,
        notes=data.notes,
    ))
    return PostTrainingResponse(uuid=training_uuid)


@router.delete("/trainings/{training_uuid}", status_code=204)
async def cancel_training(
    training_uuid: str,
    user: AuthUser = Depends(get_current_user),
    app=Depends(get_application),
):
    await app.commands.cancel_training.handle(
        CancelTraining(training_uuid=training_uuid, user=training_user(user))
    )


@router.put("/trainings/{training_uuid}/reschedule", status_code=204)
async def reschedule_training(
    training_uuid: str,
    data: RescheduleRequest,
    user: AuthUser = Depends(get_current_user),
    app=Depends(get_application),
):
    await app.commands.reschedule_training.handle(RescheduleTraining(
        training_uuid=training_uuid,
        new_time=data.time,
        user=training_user(user),
        new_notes=data.notes,
    ))


@router.put("/trainings/{training_uuid}/request-reschedule", status_code=204)
async def request_reschedule(
    training_uuid: str,
    data: RescheduleRequest,
    user: AuthUser = Depends(get_current_user),
    app=Depends(get_application),
):
    await app.commands.request_training_reschedule.handle(RequestTrainingReschedule(
        training_uuid=training_uuid,
        new_time=data.time,
        user=training_user(user),
        new_notes=data.notes,
    ))


@router.put("/trainings/{training_uuid}/approve-reschedule", status_code=204)
async def approve_reschedule(
    training_uuid: str,
    user: AuthUser = Depends(get_current_user),
    app=Depends(get_application),
):
    await app.commands.approve_training_reschedule.handle(
        ApproveTrainingReschedule(training_uuid=training_uuid, user=training_user(user))
    )


@router.put("/trainings/{training_uuid}/reject-reschedule", status_code=204)
async def reject_reschedule(
    training_uuid: str,
    user: AuthUser = Depends(get_current_user),
    app=Depends(get_application),
):
    await app.commands.reject_training_reschedule.handle(
        RejectTrainingReschedule(training_uuid=training_uuid, user=training_user(user))
    )
