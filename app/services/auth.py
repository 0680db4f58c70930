from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin import auth as firebase_auth
from sqlalchemy.orm import Session
from app.core.settings import settings
from app.db import get_db
from app.models.user import User

security = HTTPBearer()

# Development and test tokens; each maps to a persisted user so FK constraints pass
MOCK_TOKENS = {
    "mock-user-token": ("user-1", "User One", "user@example.com"),
    "mock-user-2-token": ("user-2", "User Two", "user2@example.com"),
}


def _mock_tokens_enabled() -> bool:
    return settings.is_development or settings.is_test


def _display_name(decoded_token: dict, email: str) -> str:
    if decoded_token.get("name"):
        return decoded_token["name"]
    given = decoded_token.get("given_name", "")
    family = decoded_token.get("family_name", "")
    if given or family:
        return (given + " " + family).strip()
    return email.split("@")[0]


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials

    if token in MOCK_TOKENS and _mock_tokens_enabled():
        uid, name, email = MOCK_TOKENS[token]
        user = db.query(User).filter(User.id == uid).first()
        if not user:
            user = User(id=uid, email=email, display_name=name)
            db.add(user)
            db.commit()
            db.refresh(user)
        return user

    try:
        decoded_token = firebase_auth.verify_id_token(token)
        user_id = decoded_token["uid"]
        email = decoded_token["email"]
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    name = _display_name(decoded_token, email)
    picture = decoded_token.get("picture")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        # Existing account created before this identity was linked
        user = db.query(User).filter(User.email == email).first()
        if user:
            user.id = user_id
    if user:
        # Keep profile fields in sync with the identity provider
        user.display_name = name
        if picture:
            user.photo_url = picture
        db.commit()
        return user

    user = User(id=user_id, email=email, display_name=name, photo_url=picture)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
