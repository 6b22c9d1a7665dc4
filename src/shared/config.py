from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from shared.constants import TMAP_FRONT_MAX_GAP_M as DEFAULT_FRONT_MAX_GAP_M


class Settings(BaseSettings):
    KAKAO_REST_KEY: str = ""              # Kakao Local (주소/키워드 검색)
    KAKAO_MOBILITY_REST_KEY: str = ""     # Kakao Mobility 길찾기 (없으면 REST 키 사용)
    TMAP_APP_KEY: str = ""
    GEMINI_API_KEY: str = Field("", validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"))
    GEMINI_MODEL: str = "gemini-2.0-flash"

    HTTP_TIMEOUT_MS: int = 8000           # 모든 외부 호출에 동일 적용
    TMAP_FRONT_MAX_GAP_M: float = DEFAULT_FRONT_MAX_GAP_M
    TMAP_LOCAL_TRANSFORM_FALLBACK: bool = False
    PORT: int = 3000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def kakao_mobility_key(self) -> str:
        return self.KAKAO_MOBILITY_REST_KEY or self.KAKAO_REST_KEY

    @property
    def timeout_s(self) -> float:
        return self.HTTP_TIMEOUT_MS / 1000.0


settings = Settings()
