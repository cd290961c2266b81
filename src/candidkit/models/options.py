"""Display options shared by the codec builder and the value resolver.

Loaded from a dict or from a JSON/YAML file; every builder accepts
``options=None`` and falls back to the defaults below.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, NonNegativeInt, PositiveInt

from candidkit.core.logger import configure_root_logger


DEFAULT_BLOB_HEX_THRESHOLD = 96


class DisplayOptions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Byte sequences up to this length are shown as hex text, longer ones stay raw.
    blob_hex_threshold: NonNegativeInt = DEFAULT_BLOB_HEX_THRESHOLD
    hex_prefix: bool = True

    # Records with more fields than this get the "truncate" display hint.
    large_record_fields: PositiveInt = 5

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DisplayOptions":
        return cls.model_validate(data or {})

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "DisplayOptions":
        """Load options from a ``.json`` or ``.yaml``/``.yml`` file."""
        config_file = Path(path)
        if not config_file.exists():
            raise FileNotFoundError(f"Options file not found: {path}")

        with open(config_file, "r") as f:
            if config_file.suffix == ".json":
                data = json.load(f)
            elif config_file.suffix in (".yaml", ".yml"):
                import yaml

                data = yaml.safe_load(f)
            else:
                raise ValueError(
                    f"Unsupported options format: {config_file.suffix}. "
                    "Use .json or .yaml"
                )
        return cls.from_dict(data)

    def configure_logging(self) -> None:
        configure_root_logger(self.log_level)


def resolve_options(options: Optional[DisplayOptions]) -> DisplayOptions:
    return options if options is not None else DisplayOptions()
