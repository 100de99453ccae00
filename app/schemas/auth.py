"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LoginRequest(BaseModel):
    """로그인 요청 스키마.

    Login request schema. Compared against the single configured
    credential pair.

    Attributes:
        username: 로그인 아이디 (Login username)
        password: 비밀번호 (Plain text password)
    """

    username: str = ""
    password: str = ""


class TokenResponse(BaseModel):
    """세션 토큰 발급 응답 스키마.

    Session token issuance response schema.

    Attributes:
        token: JWT 세션 토큰 (Session bearer token)
        expires_in: 만료까지 남은 초 (Seconds until the session expires)
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token: str
    expires_in: int
