from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from gym_backend import store
from gym_backend.auth.dependencies import require_admin, require_authenticated
from gym_backend.auth.policies import AuthContext
from gym_backend.database import get_db
from gym_backend.models.trainer import Trainer
from gym_backend.routes.common import database_guard, id_mismatch

router = APIRouter(tags=['trainers'])


class TrainerRequest(BaseModel):
    id: int | None = None
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    specialty: str = ''

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TrainerResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    specialty: str | None = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def trainer_values(data: TrainerRequest) -> dict:
    return {
        'first_name': data.first_name.strip(),
        'last_name': data.last_name.strip(),
        'specialty': data.specialty.strip(),
    }


@router.get('', response_model=list[TrainerResponse])
def list_trainers(
    _: AuthContext = Depends(require_authenticated),
    db: Session = Depends(get_db),
):
    with database_guard(db):
        return [TrainerResponse.model_validate(trainer) for trainer in store.list_all(db, Trainer)]


@router.get('/{trainer_id}', response_model=TrainerResponse)
def get_trainer(
    trainer_id: int,
    _: AuthContext = Depends(require_authenticated),
    db: Session = Depends(get_db),
):
    with database_guard(db):
        return TrainerResponse.model_validate(store.get_by_id(db, Trainer, trainer_id))


@router.post('', response_model=TrainerResponse, status_code=status.HTTP_201_CREATED)
def create_trainer(
    data: TrainerRequest,
    response: Response,
    _: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    with database_guard(db):
        trainer = store.create(db, Trainer(**trainer_values(data)))
        response.headers['Location'] = f'/api/trainers/{trainer.id}'
        return TrainerResponse.model_validate(trainer)


@router.put('/{trainer_id}', status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def update_trainer(
    trainer_id: int,
    data: TrainerRequest,
    _: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if data.id != trainer_id:
        raise id_mismatch()

    with database_guard(db):
        store.update(db, Trainer, trainer_id, trainer_values(data))

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete('/{trainer_id}', status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_trainer(
    trainer_id: int,
    _: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    with database_guard(db):
        store.delete(db, Trainer, trainer_id)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
