import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import jwt
from jwt.exceptions import InvalidTokenError, ExpiredSignatureError
from passlib.context import CryptContext
from fastapi import HTTPException, status


WWW_BEARER = {"WWW-Authenticate": "Bearer"}


class JWTManager:
    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_minutes: Optional[int] = None,
        trial_expire_minutes: Optional[int] = None,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
        leeway_seconds: int = 60,  # 容忍時鐘誤差
    ):
        self.secret_key = secret_key or os.getenv("JWT_SECRET_KEY")
        if not self.secret_key:
            raise RuntimeError("JWT_SECRET_KEY not set")

        self.algorithm = (algorithm or os.getenv("JWT_ALG") or "HS256").upper()
        self.expire_minutes = int(expire_minutes or os.getenv("JWT_EXPIRE_MINUTES") or 60)
        # 試用身分不落地，給短一點的有效時間
        self.trial_expire_minutes = int(trial_expire_minutes or os.getenv("TRIAL_EXPIRE_MINUTES") or 60)
        self.issuer = issuer or os.getenv("JWT_ISS")
        self.audience = audience or os.getenv("JWT_AUD")
        self.leeway_seconds = leeway_seconds

        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    # 密碼雜湊/驗證
    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify_password(self, plain: str, hashed: str) -> bool:
        return self.pwd_context.verify(plain, hashed)

    # JWT 簽發
    def create_token(
        self,
        subject: str | int,
        extra: Optional[Dict[str, Any]] = None,
        expire_minutes: Optional[int] = None,
    ) -> str:
        now = datetime.now(timezone.utc)
        minutes = expire_minutes or self.expire_minutes
        payload: Dict[str, Any] = {
            "sub": str(subject),  # 統一為字串，避免型別落差
            "iat": int(now.timestamp()),
            "ttl": minutes * 60,  # 以秒為單位
            "exp": int((now + timedelta(minutes=minutes)).timestamp()),
            "jti": uuid.uuid4().hex,  # 登出時用來撤銷
        }
        if self.issuer:
            payload["iss"] = self.issuer
        if self.audience:
            payload["aud"] = self.audience
        if extra:
            payload.update(extra)
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def create_trial_token(self, session_id: str, locale: str) -> str:
        """試用模式：sub 為 trial:<session>，事件只存在記憶體中"""
        return self.create_token(
            subject=f"trial:{session_id}",
            extra={"trial": True, "locale": locale},
            expire_minutes=self.trial_expire_minutes,
        )

    # JWT 驗證/解碼
    def decode_token(self, token: str) -> Dict[str, Any]:
        try:
            decoded = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat", "sub"]},
                leeway=self.leeway_seconds,
                issuer=self.issuer if self.issuer else None,
                audience=self.audience if self.audience else None,
            )
            return decoded

        except ExpiredSignatureError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Access token expired",
                headers=WWW_BEARER,
            ) from e

        except InvalidTokenError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid access token",
                headers=WWW_BEARER,
            ) from e
