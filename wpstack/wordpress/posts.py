from __future__ import annotations

import logging
from typing import Tuple

from .cli import WpCli


logger = logging.getLogger(__name__)


def upsert_post(wp: WpCli, post_type: str, name: str, content: str, title: str) -> Tuple[int, bool]:
    """Create or update the post of ``post_type`` whose slug is ``name``.

    Returns ``(post_id, created)``. Exactly one create call happens when no
    post matches, exactly one update call otherwise.
    """
    ids = wp.post_ids(post_type, name)
    if ids:
        post_id = ids[0]
        if len(ids) > 1:
            logger.warning("%d %s posts named %s; updating %d", len(ids), post_type, name, post_id)
        wp.post_update(post_id, {"post_content": content})
        return post_id, False
    post_id = wp.post_create(
        {
            "post_type": post_type,
            "post_name": name,
            "post_title": title,
            "post_status": "publish",
            "post_content": content,
        }
    )
    return post_id, True
