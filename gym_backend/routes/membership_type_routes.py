import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from gym_backend import store
from gym_backend.auth.dependencies import require_admin, require_authenticated
from gym_backend.auth.policies import AuthContext
from gym_backend.database import get_db
from gym_backend.models.membership_type import MembershipType
from gym_backend.routes.common import database_guard, id_mismatch

logger = logging.getLogger(__name__)

router = APIRouter(tags=['membership types'])


class MembershipTypeRequest(BaseModel):
    id: int | None = None
    name: str = Field(min_length=1, max_length=100)
    cost: int = Field(ge=0)
    duration_in_months: int = Field(ge=1)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class MembershipTypeResponse(BaseModel):
    id: int
    name: str
    cost: int
    duration_in_months: int

    class Config:
        alias_generator = to_camel
        populate_by_name = True


def to_membership_type_response(membership_type: MembershipType) -> MembershipTypeResponse:
    return MembershipTypeResponse(
        id=membership_type.id,
        name=membership_type.name,
        cost=membership_type.cost,
        duration_in_months=membership_type.duration_months,
    )


def membership_type_values(data: MembershipTypeRequest) -> dict:
    return {
        'name': data.name.strip(),
        'cost': data.cost,
        'duration_months': data.duration_in_months,
    }


@router.get('', response_model=list[MembershipTypeResponse])
def list_membership_types(
    _: AuthContext = Depends(require_authenticated),
    db: Session = Depends(get_db),
):
    with database_guard(db):
        return [to_membership_type_response(item) for item in store.list_all(db, MembershipType)]


@router.get('/{membership_type_id}', response_model=MembershipTypeResponse)
def get_membership_type(
    membership_type_id: int,
    _: AuthContext = Depends(require_authenticated),
    db: Session = Depends(get_db),
):
    with database_guard(db):
        return to_membership_type_response(store.get_by_id(db, MembershipType, membership_type_id))


@router.post('', response_model=MembershipTypeResponse, status_code=status.HTTP_201_CREATED)
def create_membership_type(
    data: MembershipTypeRequest,
    response: Response,
    _: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    with database_guard(db):
        membership_type = store.create(db, MembershipType(**membership_type_values(data)))
        response.headers['Location'] = f'/api/membershiptypes/{membership_type.id}'
        return to_membership_type_response(membership_type)


@router.put('/{membership_type_id}', status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def update_membership_type(
    membership_type_id: int,
    data: MembershipTypeRequest,
    _: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if data.id != membership_type_id:
        raise id_mismatch()

    with database_guard(db):
        store.update(db, MembershipType, membership_type_id, membership_type_values(data))

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete('/{membership_type_id}', status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_membership_type(
    membership_type_id: int,
    _: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    # Members on this plan are deleted with it (ON DELETE CASCADE).
    # TODO: decide whether deleting a plan that still has members should be rejected instead.
    with database_guard(db):
        membership_type = store.get_by_id(db, MembershipType, membership_type_id)
        member_count = len(membership_type.members)
        store.delete(db, MembershipType, membership_type_id)

    if member_count:
        logger.info('Deleted membership type %s and %s member(s) on it', membership_type_id, member_count)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
