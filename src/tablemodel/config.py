import pathlib
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from .gateway import SQLAlchemyGateway, create_gateway


class GatewayConfig(BaseModel):
    """Connection details for one gateway."""
    url: str
    table_prefix: Optional[str] = None
    charset: Optional[str] = None
    collate: Optional[str] = None
    engine_options: Dict[str, Any] = Field(default_factory=dict)


class GatewayFileConfig(BaseModel):
    """File-level schema for a gateway YAML file."""
    version: int = Field(1, description="Schema version")
    gateway: GatewayConfig


def load_gateway_config(path: Union[str, pathlib.Path]) -> GatewayConfig:
    """
    Loads a gateway configuration from YAML.

    Expected layout:

        version: 1
        gateway:
          url: sqlite:///data/app.db
          table_prefix: app_
    """
    target_path = pathlib.Path(path)
    if not target_path.exists():
        raise FileNotFoundError(f"Gateway config not found: {target_path}")

    try:
        raw = yaml.safe_load(target_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML from {target_path}: {e}")

    try:
        return GatewayFileConfig.model_validate(raw).gateway
    except ValidationError as e:
        raise ValueError(f"Gateway Configuration Invalid: {e}")


def create_gateway_from_config(config: GatewayConfig) -> SQLAlchemyGateway:
    return create_gateway(
        config.url,
        table_prefix=config.table_prefix,
        charset=config.charset,
        collate=config.collate,
        engine_options=config.engine_options,
    )
