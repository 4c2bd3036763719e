# crud/user.py
from typing import Optional, List, Tuple
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import desc, func
from passlib.context import CryptContext

from glowfit.core.config import utc_now
from glowfit.models.user import User
from glowfit.models.enums import UserRole, UserStatus
from glowfit.schemas.common import PaginationParams

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class CRUDUser:
    """CRUD operations for User model."""

    # =====================================================================
    # HELPER METHODS
    # =====================================================================

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password."""
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        return pwd_context.verify(plain_password, hashed_password)

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    def create(
        self,
        db: Session,
        *,
        email: str,
        password: str,
        name: Optional[str] = None,
        role: UserRole = UserRole.USER,
    ) -> User:
        """
        Create a new user.

        Args:
            db: Database session
            email: Login e-mail, stored lower-cased
            password: Plain password, hashed before storage
            name: Optional display name
            role: Account role

        Returns:
            Created User instance
        """
        db_obj = User(
            email=email.lower(),
            name=name,
            password_hash=self.hash_password(password),
            role=role,
            status=UserStatus.ACTIVE,
        )

        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get(self, db: Session, id: UUID) -> Optional[User]:
        """Get user by ID."""
        return db.query(User).filter(User.id == id).first()

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        """Get user by e-mail (case-insensitive)."""
        return db.query(User).filter(User.email == email.lower()).first()

    def get_first_admin(self, db: Session) -> Optional[User]:
        return db.query(User).filter(User.role == UserRole.ADMIN).first()

    def get_multi(
        self, db: Session, *, params: PaginationParams
    ) -> Tuple[List[User], int]:
        """
        Get paginated users, newest first.

        Returns:
            Tuple of (users list, total count)
        """
        query = db.query(User)
        total = query.count()
        users = (
            query.order_by(desc(User.created_at))
            .offset(params.offset)
            .limit(params.limit)
            .all()
        )
        return users, total

    def get_all(self, db: Session) -> List[User]:
        return db.query(User).order_by(desc(User.created_at)).all()

    def count(self, db: Session) -> int:
        return db.query(func.count(User.id)).scalar()

    # =====================================================================
    # UPDATE OPERATIONS
    # =====================================================================

    def update_password(self, db: Session, *, db_obj: User, new_password: str) -> User:
        """Hash and store a new password."""
        db_obj.password_hash = self.hash_password(new_password)
        db_obj.password_changed_at = utc_now()

        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update_status(self, db: Session, *, db_obj: User, status: UserStatus) -> User:
        """Update account status (admin only)."""
        db_obj.status = status

        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update_last_login(self, db: Session, *, db_obj: User) -> User:
        db_obj.last_login_at = utc_now()
        db.commit()
        db.refresh(db_obj)
        return db_obj


crud_user = CRUDUser()
