from __future__ import annotations

import logging
from typing import Dict, List

from .envstore import EnvStore
from .settings import SiteCredentials, StackSettings


logger = logging.getLogger(__name__)

# Byte lengths are fixed per key; hex form is twice as long.
SECRET_LENGTHS: Dict[str, int] = {
    "MYSQL_ROOT_PASSWORD": 32,
    "MYSQL_PASSWORD": 32,
    "ADMIN_PASS": 16,
}

SALT_KEYS: List[str] = [
    "WORDPRESS_AUTH_KEY",
    "WORDPRESS_SECURE_AUTH_KEY",
    "WORDPRESS_LOGGED_IN_KEY",
    "WORDPRESS_NONCE_KEY",
    "WORDPRESS_AUTH_SALT",
    "WORDPRESS_SECURE_AUTH_SALT",
    "WORDPRESS_LOGGED_IN_SALT",
    "WORDPRESS_NONCE_SALT",
]
SALT_LENGTH = 64


def plain_defaults(settings: StackSettings) -> Dict[str, str]:
    return {
        "MYSQL_DATABASE": "wp",
        "MYSQL_USER": "wp",
        "SITE_URL": settings.site_url,
        "SITE_TITLE": settings.site_title,
        "ADMIN_EMAIL": settings.admin_email,
        "ADMIN_USER": settings.admin_user,
    }


def recognized_keys(settings: StackSettings) -> List[str]:
    return list(plain_defaults(settings)) + list(SECRET_LENGTHS) + list(SALT_KEYS)


def ensure_credentials(store: EnvStore, settings: StackSettings) -> SiteCredentials:
    """Fill in every missing key, persist the new ones, return the record.

    Keys already in the store keep their values.
    """
    for key, value in plain_defaults(settings).items():
        store.ensure_default(key, value)
    for key, length in SECRET_LENGTHS.items():
        store.ensure_random(key, length)
    for key in SALT_KEYS:
        store.ensure_random(key, SALT_LENGTH)
    written = store.persist_appended()
    if written:
        logger.info("Added %d entries to %s: %s", written, store.path, ", ".join(store.added))
    return SiteCredentials.from_env(store.as_dict(), SALT_KEYS)
