"""
사용자 서비스

등록, 조회, 인증, 명시적 수정.
사용자는 코어에서 삭제하지 않는다.
"""

import hashlib
import hmac
import logging
import os

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import DuplicateEmailError, InvalidArgumentError, NotFoundError
from core.types import UserType
from core.utils.timezone import now_utc, to_db_timestamp
from core.wallet.models import User, is_valid_email, is_valid_full_name

logger = logging.getLogger(__name__)

HASH_ALGORITHM = "pbkdf2_sha256"
HASH_ITERATIONS = 100_000


def hash_password(password: str, salt: bytes | None = None, iterations: int = HASH_ITERATIONS) -> str:
    """비밀번호 해시 생성

    형식: pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>
    """
    if salt is None:
        salt = os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{HASH_ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """비밀번호 검증 (상수 시간 비교)"""
    try:
        algorithm, iterations, salt_hex, _ = password_hash.split("$")
        if algorithm != HASH_ALGORITHM:
            return False
        expected = hash_password(password, bytes.fromhex(salt_hex), int(iterations))
    except ValueError:
        return False
    return hmac.compare_digest(expected, password_hash)


class UserService:
    """사용자 서비스

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def register(
        self,
        full_name: str,
        email: str,
        password: str,
        user_type: UserType = UserType.CUSTOMER,
    ) -> int:
        """사용자 등록

        Args:
            full_name: 이름 (3자 이상)
            email: 이메일 (고유)
            password: 평문 비밀번호 (해시 후 저장)
            user_type: 사용자 유형

        Returns:
            생성된 사용자 ID

        Raises:
            InvalidArgumentError: 이름/이메일/비밀번호가 유효하지 않은 경우
            DuplicateEmailError: 이미 등록된 이메일
        """
        full_name = (full_name or "").strip()
        email = (email or "").strip().lower()

        if not is_valid_full_name(full_name):
            raise InvalidArgumentError("Full name must have at least 3 characters")
        if not is_valid_email(email):
            raise InvalidArgumentError(f"Invalid email address: {email!r}")
        if not password:
            raise InvalidArgumentError("Password must not be empty")

        try:
            user_type = UserType.parse(user_type)
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e

        if await self.email_exists(email):
            raise DuplicateEmailError(email)

        user_id = await self.db.execute_insert(
            """
            INSERT INTO users (full_name, email, password_hash, user_type, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                full_name,
                email,
                hash_password(password),
                user_type.value,
                to_db_timestamp(now_utc()),
            ),
        )

        logger.info("User registered", extra={"user_id": user_id, "user_type": user_type.value})
        return user_id

    async def get_user(self, user_id: int) -> User:
        """ID로 사용자 조회

        Raises:
            NotFoundError: 사용자가 없는 경우
        """
        row = await self.db.query_one("SELECT * FROM users WHERE id = ?", (user_id,))
        if row is None:
            raise NotFoundError("User", user_id)
        return User.from_row(row)

    async def find_by_email(self, email: str) -> User | None:
        """이메일로 사용자 조회 (없으면 None)"""
        row = await self.db.query_one(
            "SELECT * FROM users WHERE email = ?",
            ((email or "").strip().lower(),),
        )
        return User.from_row(row) if row else None

    async def list_users(self) -> list[User]:
        """전체 사용자 (최신순)"""
        rows = await self.db.query("SELECT * FROM users ORDER BY created_at DESC, id DESC")
        return [User.from_row(row) for row in rows]

    async def email_exists(self, email: str) -> bool:
        return await self.db.exists("users", "email = ?", ((email or "").strip().lower(),))

    async def user_exists(self, user_id: int) -> bool:
        return await self.db.exists("users", "id = ?", (user_id,))

    async def authenticate(self, email: str, password: str) -> User | None:
        """이메일/비밀번호 인증

        Returns:
            인증 성공 시 User, 실패 시 None
        """
        user = await self.find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Authentication failed")
            return None
        return user

    async def update_user(
        self,
        user_id: int,
        full_name: str | None = None,
        user_type: UserType | str | None = None,
    ) -> User:
        """이름 또는 사용자 유형 수정

        Raises:
            InvalidArgumentError: 변경 항목이 없거나 유효하지 않은 경우
            NotFoundError: 사용자가 없는 경우
        """
        if full_name is None and user_type is None:
            raise InvalidArgumentError("Nothing to update")

        current = await self.get_user(user_id)

        new_name = current.full_name
        if full_name is not None:
            new_name = full_name.strip()
            if not is_valid_full_name(new_name):
                raise InvalidArgumentError("Full name must have at least 3 characters")

        new_type = current.user_type
        if user_type is not None:
            try:
                new_type = UserType.parse(user_type)
            except ValueError as e:
                raise InvalidArgumentError(str(e)) from e

        await self.db.execute_mutation(
            "UPDATE users SET full_name = ?, user_type = ? WHERE id = ?",
            (new_name, new_type.value, user_id),
        )
        return await self.get_user(user_id)
