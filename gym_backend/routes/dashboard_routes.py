from fastapi import APIRouter, Depends
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from gym_backend import store
from gym_backend.auth.dependencies import require_authenticated
from gym_backend.auth.policies import AuthContext
from gym_backend.database import get_db
from gym_backend.models.member import Member
from gym_backend.models.membership_type import MembershipType
from gym_backend.models.trainer import Trainer
from gym_backend.models.user import ADMIN_ROLE
from gym_backend.routes.common import database_guard
from gym_backend.routes.member_routes import MemberResponse, to_member_response

router = APIRouter(tags=['dashboard'])


class DashboardStatsResponse(BaseModel):
    """Admins get the counts, everyone else gets their own profile."""
    total_members: int | None = None
    total_trainers: int | None = None
    total_membership_types: int | None = None
    my_profile: MemberResponse | None = None
    is_profile_complete: bool | None = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


@router.get('', response_model=DashboardStatsResponse, response_model_exclude_unset=True)
def get_dashboard(
    context: AuthContext = Depends(require_authenticated),
    db: Session = Depends(get_db),
):
    with database_guard(db):
        if context.has_role(ADMIN_ROLE):
            return DashboardStatsResponse(
                total_members=store.count(db, Member),
                total_trainers=store.count(db, Trainer),
                total_membership_types=store.count(db, MembershipType),
            )

        member = store.find_member_by_email(db, context.email)
        return DashboardStatsResponse(
            my_profile=to_member_response(member) if member else None,
            is_profile_complete=member is not None,
        )
