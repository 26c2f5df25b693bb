from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Build settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Sources; "{app}" is replaced with the logical application name
    source_template: str = "{app}/src/app"
    declaration_suffix: str = ".component.ts"
    markup_suffix: str = ".component.html"
    template_anchor: str = "src/app"

    # Output
    output_dir: str = "public/data"
    prune_leaves: bool = False

    log_level: str = "INFO"

    def source_root(self, app: str) -> str:
        return self.source_template.format(app=app)

    def output_path(self, app: str) -> str:
        return f"{self.output_dir.rstrip('/')}/{app}-data.json"


settings = Settings()
