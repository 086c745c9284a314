"""Configuration management using pydantic-settings"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Document store: 'sqlite' or 'memory'
    store_mode: str = Field(default="sqlite", description="Document store backend")
    database_path: str = Field(default="./data/documents.db", description="Path to SQLite database")
    output_dir: str = Field(default="./data/output", description="Directory for generated PDFs")
    templates_dir: Optional[str] = Field(default=None, description="Override directory of template JSON files")
    log_level: str = Field(default="INFO", description="Logging level")
    session_ttl_minutes: int = Field(default=30, description="Idle minutes before an API edit session expires")
    max_sessions: int = Field(default=1000, description="Maximum live API edit sessions")

    # Page geometry, in layout units (mm on an A4 page)
    page_height: float = Field(default=280, description="Bottom of the usable page area")
    top_margin: float = Field(default=20, description="Cursor position after a page break")
    left_margin: float = Field(default=20, description="Left text edge")
    right_margin: float = Field(default=190, description="Right text edge")
    line_height: float = Field(default=6, description="Height of one wrapped line")
    signature_height: float = Field(default=25, description="Fixed height of a signature block")

    # Fonts
    font_name: str = Field(default="Helvetica", description="Regular font")
    font_bold_name: str = Field(default="Helvetica-Bold", description="Bold font")
    font_dir: Optional[str] = Field(default=None, description="Directory with Regular.ttf and Bold.ttf")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def page_geometry(self):
        """Build the layout geometry from the page settings"""
        from legal_forms.services.layout import PageGeometry

        return PageGeometry(
            page_height=self.page_height,
            top_margin=self.top_margin,
            left_margin=self.left_margin,
            right_margin=self.right_margin,
            line_height=self.line_height,
            signature_height=self.signature_height,
        )


def get_settings() -> Settings:
    """Get application settings"""
    return Settings()
