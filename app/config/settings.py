from typing import Literal, Optional
from urllib.parse import quote_plus

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: SecretStr = Field(default=SecretStr("postgres"))
    database: str = "creative_compliance"
    schema_name: Optional[str] = None
    serverless: bool = Field(
        default=True,
        description="If true, disable connection pooling so serverless DBs can pause.",
    )

    @property
    def url(self) -> str:
        """Get database URL"""
        username = quote_plus(self.username)
        password = quote_plus(self.password.get_secret_value())
        return (
            "postgresql+asyncpg://"
            f"{username}:{password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class S3Config(BaseSettings):
    """Object storage holding the uploaded creatives."""

    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: str = "us-east-1"
    bucket_name: str = "campaign-assets"
    public_base_url: Optional[str] = Field(
        default=None,
        description="Override for the public URL prefix (CDN or bucket website).",
    )

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class BedrockConfig(BaseSettings):
    """Amazon Bedrock configuration for the language and vision capabilities."""

    region: str = Field(
        default="us-east-1",
        validation_alias="BEDROCK_REGION",
    )
    model_id: str = Field(
        default="anthropic.claude-3-5-sonnet-20240620-v1:0",
        validation_alias="BEDROCK_MODEL_ID",
    )
    vision_model_id: str = Field(
        default="anthropic.claude-3-5-sonnet-20240620-v1:0",
        validation_alias="BEDROCK_VISION_MODEL_ID",
    )
    max_tokens: int = Field(
        default=4096,
        validation_alias="BEDROCK_MAX_TOKENS",
        ge=1,
        le=8192,
    )
    temperature: float = Field(
        default=0.1,
        validation_alias="BEDROCK_TEMPERATURE",
        ge=0.0,
        le=1.0,
    )
    top_p: float = Field(
        default=0.9,
        validation_alias="BEDROCK_TOP_P",
        ge=0.0,
        le=1.0,
    )
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="BEDROCK_API_KEY",
    )
    max_attempts: int = Field(
        default=5,
        validation_alias="BEDROCK_MAX_ATTEMPTS",
        ge=1,
    )
    base_delay_seconds: float = Field(
        default=2.0,
        validation_alias="BEDROCK_BASE_DELAY_SECONDS",
        ge=0.0,
    )
    max_delay_seconds: float = Field(
        default=30.0,
        validation_alias="BEDROCK_MAX_DELAY_SECONDS",
        ge=0.0,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class TranscribeConfig(BaseSettings):
    """Amazon Transcribe batch job configuration."""

    region: str = "us-east-1"
    language_code: Optional[str] = None
    identify_language: bool = True
    poll_interval_seconds: float = Field(default=5.0, gt=0.0)
    max_poll_attempts: int = Field(default=60, ge=1)
    request_timeout_seconds: float = Field(default=30.0, gt=0.0)

    model_config = SettingsConfigDict(
        env_prefix="TRANSCRIBE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class PipelineConfig(BaseSettings):
    """Tunables of the compliance pipeline itself."""

    worker_concurrency: int = Field(default=2, ge=1)
    default_creative_type: Literal["UGC", "Produced"] = "UGC"
    default_confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    max_inline_image_bytes: int = Field(default=20 * 1024 * 1024, ge=1)
    mispronunciation_confidence_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    max_json_retries: int = Field(default=1, ge=0)
    max_transcript_words_in_prompt: int = Field(default=100, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class QueueConfig(BaseSettings):
    """Work queue used to hand assets from the trigger to the workers."""

    backend: Literal["memory", "rabbitmq"] = "memory"
    queue_name: str = "creative-compliance-jobs"
    rabbitmq_host: str = "localhost"
    rabbitmq_port: int = 5672
    rabbitmq_username: str = "guest"
    rabbitmq_password: SecretStr = Field(default=SecretStr("guest"))
    poll_interval_seconds: float = Field(default=1.0, gt=0.0)

    model_config = SettingsConfigDict(
        env_prefix="QUEUE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Creative Compliance Pipeline"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/compliance_pipeline.log"
    start_worker: bool = True

    # Database
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # S3
    s3: S3Config = Field(default_factory=S3Config)

    # Bedrock
    bedrock: BedrockConfig = Field(default_factory=BedrockConfig)

    # Transcribe
    transcribe: TranscribeConfig = Field(default_factory=TranscribeConfig)

    # Pipeline
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    # Queue
    queue: QueueConfig = Field(default_factory=QueueConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
