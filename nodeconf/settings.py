from __future__ import annotations
import os
from pathlib import Path
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # os.pathsep separated, load order = override order
    ini_files: str = Field(default="", alias="NODECONF_INI_FILES")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")
    log_file: Optional[Path] = Field(default=None, alias="NODECONF_LOG_FILE")

    api_host: str = Field(default="127.0.0.1", alias="NODECONF_API_HOST")
    api_port: int = Field(default=5984, alias="NODECONF_API_PORT")

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    def ini_paths(self) -> List[Path]:
        return [Path(p) for p in self.ini_files.split(os.pathsep) if p.strip()]
