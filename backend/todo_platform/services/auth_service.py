import logging
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from todo_platform.core.errors import ConflictError, UnauthorizedError
from todo_platform.core.security import create_access_token, get_password_hash, verify_password
from todo_platform.models.user import User

logger = logging.getLogger(__name__)


class AuthService:
    """Credential Store and Identity Issuer: registers users and issues tokens"""

    @staticmethod
    def get_by_email(email: str, db: Session) -> User | None:
        return db.query(User).filter(User.email == email).first()

    def register(self, email: str, password: str, db: Session) -> User:
        """
        Create a user with a bcrypt hash of the password.

        The uniqueness check and the insert are two separate statements.
        Two concurrent registrations can both pass the check; the unique
        index then rejects the slower one, which surfaces as a conflict.
        """
        # Checked before hashing so a duplicate never writes anything
        if self.get_by_email(email, db) is not None:
            raise ConflictError()

        user = User(email=email, password_hash=get_password_hash(password))
        try:
            db.add(user)
            db.commit()
            db.refresh(user)
        except IntegrityError:
            # Lost the race against a concurrent registration of the same email
            db.rollback()
            raise ConflictError()
        except SQLAlchemyError:
            # Store failure - roll back and let the handler map it to a 500
            db.rollback()
            raise

        logger.info(f"Registered user {user.id}")
        return user

    def login(self, email: str, password: str, db: Session) -> tuple[User, str]:
        """
        Check credentials and issue a signed token for the user.

        Unknown email and wrong password fail identically.
        """
        # Same error for unknown email and wrong password - no account enumeration
        user = self.get_by_email(email, db)
        if user is None or not verify_password(password, user.password_hash):
            logger.debug("Login rejected: invalid credentials")
            raise UnauthorizedError()

        # Stateless: nothing is stored server-side; the todo service trusts the signature
        token = create_access_token(owner_id=user.id, email=user.email)
        logger.info(f"Issued token for user {user.id}")
        return user, token


auth_service = AuthService()
