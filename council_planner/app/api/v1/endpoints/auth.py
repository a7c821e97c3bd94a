"""
Registration and login endpoints.
"""

from fastapi import APIRouter, HTTPException, status

from council_planner.app.schemas.user import LoginResult, UserLogin, UserRead, UserRegister
from council_planner.app.services.auth_service import AuthService


router = APIRouter()


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register(data: UserRegister) -> UserRead:
    """Зарегистрировать нового пользователя с ролью по умолчанию."""
    user = await AuthService.register(data)
    if user is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Login already taken")
    return user


@router.post("/login", response_model=LoginResult)
async def login(data: UserLogin) -> LoginResult:
    """Exchange login and password for a bearer token."""
    result = await AuthService.login(data)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return result
