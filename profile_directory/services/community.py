"""
Comment thread helpers shared by comment, account and user deletion.
"""
from typing import Iterable, List

from profile_directory.models.comment import Comment
from profile_directory.models.report import Report


def comment_subtree_ids(session, root_ids: Iterable[int]) -> List[int]:
    """The given comment ids plus every reply below them, parents first."""
    ids = list(dict.fromkeys(root_ids))
    seen = set(ids)
    frontier = list(ids)
    while frontier:
        children = [
            cid for (cid,) in session.query(Comment.id).filter(Comment.parent_id.in_(frontier)).all()
            if cid not in seen
        ]
        seen.update(children)
        ids.extend(children)
        frontier = children
    return ids


def delete_comments(session, root_ids: Iterable[int]) -> int:
    """
    Delete comments with their whole reply subtrees and any reports filed
    against them. The caller commits. Returns the number of comments removed.
    """
    ids = comment_subtree_ids(session, root_ids)
    if not ids:
        return 0
    session.query(Report).filter(Report.comment_id.in_(ids)).delete(synchronize_session=False)
    # Deepest first so parent_id never points at a deleted row
    for cid in reversed(ids):
        session.query(Comment).filter(Comment.id == cid).delete(synchronize_session=False)
    return len(ids)
