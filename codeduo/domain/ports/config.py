"""Config Port - typed configuration sections."""

from pydantic import BaseModel, ConfigDict, Field


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


class OllamaConfig(BaseModel):
    """Ollama connection configuration."""

    host: str = "http://localhost:11434"
    timeout: int = 120
    num_ctx: int | None = None
    num_predict: int | None = None


class OpenAIConfig(BaseModel):
    """OpenAI chat-completions endpoint configuration."""

    base_url: str = "https://api.openai.com/v1"
    api_key: str | None = Field(None, repr=False)
    timeout: int = 120
    max_tokens: int | None = None


class PipelineConfig(BaseModel):
    """Defaults applied to collaboration requests that leave them unset."""

    model_config = ConfigDict(extra="ignore")

    max_turns: int = 6
    default_filename: str = "app/page.tsx"
    project_type: str = "nextjs-tailwind"
    history_tail: int = 6
    debate_turns_per_agent: int = 2
    max_revisions_per_turn: int = 5
    temperature: float = 0.7


class SecurityConfig(BaseModel):
    """Rate limiting and CORS."""

    rate_limit_requests_per_minute: int = 30
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]


class AppConfig(BaseModel):
    """Root application configuration."""

    server: ServerConfig = ServerConfig()
    ollama: OllamaConfig = OllamaConfig()
    openai: OpenAIConfig = OpenAIConfig()
    pipeline: PipelineConfig = PipelineConfig()
    security: SecurityConfig = SecurityConfig()
    log_level: str = "INFO"
    log_file: str = ""
    log_rotation_max_mb: int = 5
    log_rotation_backups: int = 3
