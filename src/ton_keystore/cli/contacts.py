"""
Contacts list: named transfer destinations.

``contacts.json`` is a JSON array of ``{"name": ..., "address": ...}``.
It is only ever read.
"""

import logging
from pathlib import Path
from typing import List, Union

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from ..runtime.address import WalletAddress
from ..runtime.errors import CorruptStoreError

logger = logging.getLogger(__name__)


class Contact(BaseModel):
    """Named destination address."""
    name: str
    address: WalletAddress

    model_config = ConfigDict(frozen=True)


_CONTACTS = TypeAdapter(List[Contact])


def open_contacts(path: Union[str, Path]) -> List[Contact]:
    """
    Read the contacts file.

    A missing file yields an empty list.

    Raises:
        CorruptStoreError: If the file exists but is not a contacts list
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"No contacts file at {path}")
        return []
    try:
        return _CONTACTS.validate_json(path.read_bytes())
    except (OSError, ValidationError) as e:
        raise CorruptStoreError(f"Cannot read contacts from {path}", cause=e)


__all__ = ["Contact", "open_contacts"]
