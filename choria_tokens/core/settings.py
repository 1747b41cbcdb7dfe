"""Token library settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

TOKEN_VALIDITY_DEFAULT = 3600
TOKEN_FILE_MODE_DEFAULT = 0o600


class TokenSettings(BaseSettings):
    """Defaults applied when building, signing and saving tokens."""

    model_config = SettingsConfigDict(env_prefix="CHORIA_TOKENS_")

    default_validity: int = TOKEN_VALIDITY_DEFAULT
    default_issuer: str = "Choria"
    token_file_mode: int = TOKEN_FILE_MODE_DEFAULT
