# moyu/config.py
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from moyu.processor.paginator import DEFAULT_LINES_PER_PAGE

_DEFAULT_CONFIG_PATH = Path.home() / ".moyu" / "config.yaml"


@dataclass
class ReaderConfig:
    """
    Configuración del lector.
    Se carga desde ~/.moyu/config.yaml; todo tiene valor por defecto.
    """
    lines_per_page:    int           = DEFAULT_LINES_PER_PAGE
    keep_front_matter: bool          = False
    heading_patterns:  list[str]     = field(default_factory=list)   # se suman a los de serie
    db_path:           Optional[str] = None


def load_config(config_path: Optional[str] = None) -> ReaderConfig:
    """
    Carga la configuración desde YAML.
    Resuelve variables de entorno en db_path (${VAR}).
    Sin archivo de configuración → valores por defecto.
    Un config explícito que no existe sí es un error.
    """
    explicit = config_path or os.environ.get("MOYU_CONFIG_PATH")
    path = Path(explicit or _DEFAULT_CONFIG_PATH)

    if not path.exists():
        if explicit:
            raise FileNotFoundError(f"Config no encontrada en {path}")
        return ReaderConfig()

    with path.open(encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    lines_per_page = int(raw.get("lines_per_page", DEFAULT_LINES_PER_PAGE))
    if lines_per_page < 1:
        raise ValueError(f"{path}: lines_per_page debe ser >= 1")

    return ReaderConfig(
        lines_per_page    = lines_per_page,
        keep_front_matter = bool(raw.get("keep_front_matter", False)),
        heading_patterns  = [str(p) for p in raw.get("heading_patterns") or []],
        db_path           = _resolve_env(raw.get("db_path")),
    )


def _resolve_env(value: Optional[str]) -> Optional[str]:
    """Expande ${VAR_NAME} desde el entorno."""
    if not value or not value.startswith("${"):
        return value
    var_name = value.strip("${}").strip()
    return os.environ.get(var_name)
