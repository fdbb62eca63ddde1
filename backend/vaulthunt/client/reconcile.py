"""Merging polled snapshots into local view state.

Merges are field-by-field: a field the server omits (or sends as null) keeps
its local value, and word slots the user is editing keep the local text until
the edit ends.
"""
from typing import Iterable, List, Optional


def merge_words(local: Optional[List[str]], remote: Optional[List[str]], editing: Iterable[int] = ()) -> List[str]:
    local = list(local or [])
    remote = list(remote or [])
    editing = set(editing)
    merged = []
    for i in range(max(len(local), len(remote))):
        if i in editing and i < len(local):
            merged.append(local[i])
        elif i < len(remote) and remote[i] is not None:
            merged.append(remote[i])
        elif i < len(local):
            merged.append(local[i])
        else:
            merged.append('')
    return merged


def merge_teams(local: Optional[list], remote: list) -> list:
    """Remote decides which teams exist; known local fields fill the gaps."""
    by_id = {t.get('teamId'): t for t in (local or []) if isinstance(t, dict)}
    merged = []
    for team in remote:
        base = dict(by_id.get(team.get('teamId'), {}))
        base.update({k: v for k, v in team.items() if v is not None})
        merged.append(base)
    return merged


def is_valid_snapshot(snapshot) -> bool:
    return isinstance(snapshot, dict) and bool(snapshot.get('sessionCode'))


def merge_snapshot(local: Optional[dict], remote: Optional[dict], editing: Iterable[int] = ()) -> dict:
    """Return ``local`` updated from ``remote``.

    A missing or invalid snapshot (no ``sessionCode``: an error body, an
    aborted poll) leaves the local state untouched.
    """
    merged = dict(local or {})
    if not is_valid_snapshot(remote):
        return merged
    for key, value in remote.items():
        if value is None:
            continue
        if key == 'words':
            merged['words'] = merge_words(merged.get('words'), value, editing)
        elif key == 'teams' and isinstance(value, list):
            merged['teams'] = merge_teams(merged.get('teams'), value)
        else:
            merged[key] = value
    return merged
