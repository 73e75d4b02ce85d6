"""
Selection of the remote objects that need to be copied into the local bucket.
"""

from collections.abc import Iterable, Sequence

from .remote import RemoteObject


def select_objects_to_sync(
    remote_objects: Sequence[RemoteObject],
    local_keys: Iterable[str],
    force: bool = False,
    clean: bool = False,
) -> list[RemoteObject]:
    """
    Pick the remote objects to transfer, keeping listing order.

    Force and clean modes select every object with a key. Otherwise only
    objects whose key is not already present locally are selected.
    """
    sync_all = force or clean
    present = set() if sync_all else set(local_keys)

    return [obj for obj in remote_objects if obj.key and (sync_all or obj.key not in present)]
