from fastapi import APIRouter, Depends
from app.schemas.user import UserOut
from app.models.user import User
from app.services.auth import get_current_user

router = APIRouter()


@router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    # get_current_user handles token verification & user creation
    return current_user
