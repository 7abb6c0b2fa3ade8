from datetime import datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from gym_backend import store
from gym_backend.auth.dependencies import require_admin, require_self
from gym_backend.auth.policies import AuthContext, resolve_self
from gym_backend.core.errors import ValidationFailure
from gym_backend.database import get_db
from gym_backend.models.member import Member
from gym_backend.models.membership_type import MembershipType
from gym_backend.routes.common import database_guard, id_mismatch

router = APIRouter(tags=['members'])


class MemberRequest(BaseModel):
    id: int | None = None
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone_number: str = ''
    join_date: datetime
    membership_type_id: int

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator('first_name', 'last_name')
    @classmethod
    def strip_names(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name must not be blank.')
        return normalized


class MemberResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: str
    join_date: datetime | None = None
    membership_type_id: int
    membership_type_name: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True


def to_member_response(member: Member) -> MemberResponse:
    return MemberResponse(
        id=member.id,
        first_name=member.first_name,
        last_name=member.last_name,
        email=member.email or '',
        phone_number=member.phone or '',
        join_date=member.join_date,
        membership_type_id=member.membership_type_id,
        membership_type_name=member.membership_type.name if member.membership_type else '',
    )


def member_values(data: MemberRequest) -> dict:
    return {
        'first_name': data.first_name,
        'last_name': data.last_name,
        'email': data.email,
        'phone': data.phone_number,
        'join_date': data.join_date,
        'membership_type_id': data.membership_type_id,
    }


def ensure_membership_type_exists(db: Session, membership_type_id: int) -> None:
    if not store.exists(db, MembershipType, membership_type_id):
        raise ValidationFailure({'membershipTypeId': ['Membership type does not exist.']})


@router.get('', response_model=list[MemberResponse])
def list_members(
    _: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    with database_guard(db):
        return [to_member_response(member) for member in store.list_all(db, Member)]


@router.get('/me', response_model=MemberResponse)
def get_my_profile(
    context: AuthContext = Depends(require_self),
    db: Session = Depends(get_db),
):
    with database_guard(db):
        return to_member_response(resolve_self(db, context))


@router.get('/{member_id}', response_model=MemberResponse)
def get_member(
    member_id: int,
    _: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    with database_guard(db):
        return to_member_response(store.get_by_id(db, Member, member_id))


@router.post('', response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
def create_member(
    data: MemberRequest,
    response: Response,
    _: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    with database_guard(db):
        ensure_membership_type_exists(db, data.membership_type_id)
        member = store.create(db, Member(**member_values(data)))
        response.headers['Location'] = f'/api/members/{member.id}'
        return to_member_response(member)


@router.put('/{member_id}', status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def update_member(
    member_id: int,
    data: MemberRequest,
    _: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if data.id != member_id:
        raise id_mismatch()

    with database_guard(db):
        store.get_by_id(db, Member, member_id)
        ensure_membership_type_exists(db, data.membership_type_id)
        store.update(db, Member, member_id, member_values(data))

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete('/{member_id}', status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_member(
    member_id: int,
    _: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    with database_guard(db):
        store.delete(db, Member, member_id)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
