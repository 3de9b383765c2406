"""Render the compose file from its template."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable

import yaml

from .errors import ConfigError, MissingDependencyError


logger = logging.getLogger(__name__)


def load_template(template: Path) -> Dict[str, Any]:
    if not template.is_file():
        raise MissingDependencyError(f"Missing compose template: {template}", [str(template)])
    try:
        data = yaml.safe_load(template.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Compose template {template} is not valid YAML: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("services"), dict):
        raise ConfigError(f"Compose template {template} has no 'services' mapping")
    return data


def check_services(data: Dict[str, Any], required: Iterable[str], source: Path) -> None:
    missing = [name for name in required if name not in data["services"]]
    if missing:
        raise ConfigError(f"{source} does not define services: {', '.join(missing)}")


def render_compose_file(template: Path, target: Path, services: Iterable[str]) -> bool:
    """Write ``target`` from ``template`` if ``target`` does not exist.

    Variable references like ``${MYSQL_PASSWORD}`` are left for compose to
    resolve from the env file. Returns True when the file was written.
    """
    services = list(services)
    data = load_template(template)
    check_services(data, services, template)
    if target.exists():
        logger.debug("compose file %s exists; not regenerating", target)
        return False
    target.write_text(template.read_text(encoding="utf-8"), encoding="utf-8")
    logger.info("rendered %s from %s", target, template)
    return True
