from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LANGUAGE_OPTIONS: tuple[str, ...] = (
    "en-US",
    "en-IN",
    "hi-IN",
    "gu-IN",
    "mr-IN",
    "bn-IN",
    "ta-IN",
    "te-IN",
    "ml-IN",
    "kn-IN",
    "pa-IN",
    "ur-PK",
)

DEFAULT_PERSONA = (
    "Provide a concise, helpful, and empathetic response as if you are a local "
    "agricultural expert. Your response should be brief, directly address the "
    "farmer's query or concern, and encourage further interaction. If the farmer "
    "is asking a question, provide a direct answer."
)


class AwsConfig(BaseSettings):
    """Credentials and client defaults shared by every AWS service.

    Without explicit keys boto3 falls back to its default credential chain,
    which is what a Lambda execution role provides.
    """

    region: str = "us-east-1"
    access_key_id: Optional[str] = None
    secret_access_key: Optional[SecretStr] = None
    session_token: Optional[SecretStr] = None
    max_retry_attempts: int = Field(default=3, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="AWS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class S3Config(BaseSettings):
    """S3 configuration"""

    region: Optional[str] = None
    bucket_name: str = "voice-gateway-bucket"
    audio_prefix: str = "incoming_audio"
    transcript_prefix: str = "transcripts"

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class TranscribeConfig(BaseSettings):
    """Amazon Transcribe batch job configuration."""

    region: Optional[str] = None
    poll_interval_seconds: float = Field(default=5.0, gt=0)
    max_poll_attempts: int = Field(default=120, ge=1)
    language_options: list[str] = Field(
        default_factory=lambda: list(DEFAULT_LANGUAGE_OPTIONS)
    )
    media_format: str = "mp3"
    job_name_prefix: str = "voice-transcript"

    model_config = SettingsConfigDict(
        env_prefix="TRANSCRIBE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class GeminiConfig(BaseSettings):
    """Google Gemini configuration."""

    api_key: SecretStr | None = None
    model: str = "gemini-2.0-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_seconds: float = Field(default=30.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class TranslateConfig(BaseSettings):
    """Amazon Translate configuration."""

    region: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="TRANSLATE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class PollyConfig(BaseSettings):
    """Amazon Polly configuration."""

    region: Optional[str] = None
    output_format: str = "mp3"

    model_config = SettingsConfigDict(
        env_prefix="POLLY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class ElevenLabsConfig(BaseSettings):
    """ElevenLabs text-to-speech configuration."""

    api_key: SecretStr | None = None
    base_url: str = "https://api.elevenlabs.io/v1"
    model_id: str = "eleven_multilingual_v2"
    stability: float = Field(default=0.5, ge=0.0, le=1.0)
    similarity_boost: float = Field(default=0.7, ge=0.0, le=1.0)
    timeout_seconds: float = Field(default=10.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="ELEVENLABS_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class VoiceConfig(BaseSettings):
    """Language and voice selection configuration."""

    default_language: str = "hi-IN"
    voice_table_path: Optional[Path] = Field(
        default=None,
        description="Override for the bundled language-to-voice JSON table.",
    )
    persona: str = DEFAULT_PERSONA

    model_config = SettingsConfigDict(
        env_prefix="VOICE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class WebhookConfig(BaseSettings):
    """Webhook verification configuration."""

    verify_token: SecretStr | None = None

    model_config = SettingsConfigDict(
        env_prefix="WEBHOOK_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Voice Gateway"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/voice_pipeline.log"

    # AWS
    aws: AwsConfig = Field(default_factory=AwsConfig)

    # S3
    s3: S3Config = Field(default_factory=S3Config)

    # Transcribe
    transcribe: TranscribeConfig = Field(default_factory=TranscribeConfig)

    # Gemini
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)

    # Translate
    translate: TranslateConfig = Field(default_factory=TranslateConfig)

    # Polly
    polly: PollyConfig = Field(default_factory=PollyConfig)

    # ElevenLabs
    elevenlabs: ElevenLabsConfig = Field(default_factory=ElevenLabsConfig)

    # Voices
    voice: VoiceConfig = Field(default_factory=VoiceConfig)

    # Webhook verification
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = ["OPTIONS", "POST", "GET"]
    cors_allow_headers: list[str] = [
        "Content-Type",
        "X-Amz-Date",
        "Authorization",
        "X-Api-Key",
        "X-Amz-Security-Token",
        "X-Amz-User-Agent",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
