"""Read access to the ``files`` table.

Files are created by the upload pipeline; this service only looks them up.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from chatspace.server.db.tables import File


async def get_files(db: AsyncSession, file_ids: Sequence[str], *, include_text: bool = False) -> list[File]:
    """Fetch the files whose IDs are in *file_ids*, in no particular order.

    Missing IDs are silently absent from the result.  The ``text`` column is
    deferred and only loaded when *include_text* is set.
    """
    if not file_ids:
        return []

    stmt = select(File).where(File.file_id.in_(list(file_ids)))
    if include_text:
        # populate_existing: rows already in the identity map were loaded without text.
        stmt = stmt.options(undefer(File.text)).execution_options(populate_existing=True)

    result = await db.execute(stmt)
    return list(result.scalars().all())
