from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.schemas.user import UserCreate, UserLogin, UserOut
from app.models.enums import UserRole
from app.models.user import User
from app.core.dependencies import get_db, require_admin
from app.core.logging_config import get_logger
from app.core.security import hash_password, verify_password, create_access_token

router = APIRouter(prefix="/auth", tags=["Authentication"])
admin_logger = get_logger("admin")


def _register(data: UserCreate, role: UserRole, db: Session) -> User:
    if db.query(User).filter(User.email == data.email).first():
        raise HTTPException(status_code=400, detail="User already exists")

    user = User(
        name=data.name,
        email=data.email,
        password_hash=hash_password(data.password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


# =====================================================================
#                           USER REGISTER
# =====================================================================
@router.post("/register", response_model=UserOut, status_code=201)
def user_register(data: UserCreate, db: Session = Depends(get_db)):
    return _register(data, UserRole.USER, db)


# =====================================================================
#                           ADMIN REGISTER (admins only)
# =====================================================================
@router.post("/admin/register", response_model=UserOut, status_code=201)
def admin_register(
    data: UserCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = _register(data, UserRole.ADMIN, db)
    admin_logger.info(f"Admin Created | {user.email} | By={admin.email}")
    return user


# =====================================================================
#                           LOGIN
# =====================================================================
@router.post("/login")
def login(data: UserLogin, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == data.email).first()

    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": user.email, "role": user.role.value})

    return {
        "access_token": token,
        "role": user.role.value,
        "token_type": "bearer"
    }
