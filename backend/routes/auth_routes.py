from fastapi import APIRouter, Depends

from backend.auth.dependencies import AuthenticatedUser, get_current_user

router = APIRouter(tags=['auth'])


@router.get('/user', response_model=AuthenticatedUser)
def current_user(user: AuthenticatedUser = Depends(get_current_user)):
    return user
