from __future__ import annotations
import os
import re
import yaml
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

REPO_ROOT = Path(__file__).resolve().parents[3]

_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+$")


@dataclass(frozen=True)
class ValidatorConfig:
    gobl_version: str
    schema_prefix: str
    root_schemas: Mapping[str, str]  # kind -> full schema URI
    schemas_path: Path

    def kind_for(self, schema_id: str) -> Optional[str]:
        for kind, uri in self.root_schemas.items():
            if uri == schema_id:
                return kind
        return None


def load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_base_config(repo_root: Path) -> Dict[str, Any]:
    return load_yaml(repo_root / "configs" / "base.yaml")


def config_from_dict(base_cfg: Dict[str, Any], repo_root: Path) -> ValidatorConfig:
    gobl = base_cfg["gobl"]
    version = str(gobl["version"]).strip()
    prefix = str(gobl["schema_prefix"]).strip()

    if not _VERSION_RE.match(version):
        raise ValueError(f"GOBL version must look like X.Y.Z (got '{version}')")
    if not prefix.endswith("/"):
        raise ValueError(f"Schema prefix must end with '/' (got '{prefix}')")

    roots = gobl.get("root_schemas") or {}
    if not roots:
        raise ValueError("At least one root schema must be configured")

    schemas = base_cfg.get("schemas") or {}
    path_env = schemas.get("path_env")
    override = os.getenv(path_env, "").strip() if path_env else ""
    schemas_path = Path(override) if override else repo_root / schemas.get("path", "schemas")

    return ValidatorConfig(
        gobl_version=version,
        schema_prefix=prefix,
        root_schemas=MappingProxyType({str(k): prefix + str(v) for k, v in roots.items()}),
        schemas_path=schemas_path,
    )


def load_validator_config(repo_root: Path = REPO_ROOT) -> ValidatorConfig:
    return config_from_dict(load_base_config(repo_root), repo_root)
