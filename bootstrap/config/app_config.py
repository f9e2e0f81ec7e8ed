from __future__ import annotations

import pathlib
from typing import Any, Dict, Literal, Sequence

from pydantic import BaseModel, ConfigDict, Field

__all__: Sequence[str] = ('ApplicationConfig',)


class ApplicationConfig(BaseModel):
    timeout_ms: int = Field(30000, gt=0, description='Per-section load timeout in milliseconds.')
    load_strategy: Literal['concurrent', 'sequential'] = Field(
        'concurrent',
        description='concurrent: all manifest sections race; sequential: each section is awaited, in group order, before the next starts.',
    )
    pubsub_service: str = Field('PubSub', min_length=1, description='Name of the hive service whose key identifies event origins.')

    model_config = ConfigDict(extra='forbid')

    def copy_for(self, **overrides: Any) -> 'ApplicationConfig':
        return self.model_copy(update=overrides)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> 'ApplicationConfig':
        return cls.model_validate(data or {})

    @classmethod
    def from_yaml(cls, path: str | pathlib.Path) -> 'ApplicationConfig':
        import yaml
        with pathlib.Path(path).expanduser().open('r', encoding='utf-8') as fh:
            data = yaml.safe_load(fh) or {}
        return cls(**data.get('application', data))
