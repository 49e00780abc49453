"""Extraction of review comments from a server-rendered pull request page.

Expected layout (class names and the merge marker come from PanelRules):

    div#comment-list
        div.panel ...                      the PR description; its heading names the author
            div.panel-heading > a.username.strong
        div.panel ...#comment-1            a flat comment (top element has an id)
            div.panel-heading > a.username.strong
            div.panel-body.markdown-body
        div.panel ...                      a review thread (no id on the top element)
            div.panel-body
                div#discussion_r5          one inner panel per note
                    div.markdown-body
                        div  > a.username.strong
                        div  (note text)

Order keys are positional: the page lists comments in creation order but
exposes no machine-readable timestamps.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from prharvest_core.errors import DataShapeError
from prharvest_core.html.dom import Node, child_elements, find_by_class, find_by_id, has_class, text_content
from prharvest_core.models import FlatComment, Note, Thread

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PanelRules:
    container_id: str = "comment-list"
    panel_class: str = "panel"
    heading_class: str = "panel-heading"
    username_class: str = "username strong"
    flat_body_class: str = "panel-body markdown-body"
    thread_body_class: str = "panel-body"
    note_body_class: str = "markdown-body"
    muted_class: str = "muted"
    merge_marker: str = "referenced the  pull request"


GITBUCKET_PANEL_RULES = PanelRules()


@dataclass
class PanelWalk:
    author: str
    flat_comments: list[FlatComment] = field(default_factory=list)
    threads: list[Thread] = field(default_factory=list)


def _position_key(index: int) -> str:
    return f"{index:08d}"


def _author(node: Node | None, rules: PanelRules) -> str:
    return text_content(find_by_class(node, rules.username_class))


def _is_merge_event(panel: Node, rules: PanelRules) -> bool:
    heading = find_by_class(panel, rules.heading_class)
    return rules.merge_marker in text_content(find_by_class(heading, rules.muted_class))


def _thread_notes(panel: Node, rules: PanelRules) -> tuple[str, list[Note]]:
    """Return the id of the first inner panel and one Note per inner panel."""
    inner_panels = child_elements(find_by_class(panel, rules.thread_body_class))
    first_id = inner_panels[0].attrs.get("id", "") if inner_panels else ""
    notes = []
    for inner in inner_panels:
        parts = child_elements(find_by_class(inner, rules.note_body_class))
        author = _author(parts[0], rules) if parts else ""
        body = text_content(parts[1]) if len(parts) > 1 else ""
        notes.append(Note(author=author, body=body))
    return first_id, notes


def walk_comment_list(root: Node, page_url: str, rules: PanelRules = GITBUCKET_PANEL_RULES) -> PanelWalk:
    """Collect flat comments and threads from the comment list under ``root``.

    Merge-event panels are dropped. Raises DataShapeError if the page has no
    comment list or the list has no description panel.
    """
    container = find_by_id(root, rules.container_id)
    if container is None:
        raise DataShapeError(f"The pull request page has no #{rules.container_id} element.")
    panels = [div for div in child_elements(container) if has_class(div, rules.panel_class)]
    if not panels:
        raise DataShapeError("The pull request page has no description panel.")

    walk = PanelWalk(author=_author(find_by_class(panels[0], rules.heading_class), rules))

    for index, panel in enumerate(panels[1:], 1):
        if _is_merge_event(panel, rules):
            logger.debug("Skipping merge-event panel %d", index)
            continue
        panel_id = panel.attrs.get("id")
        if panel_id is not None:
            walk.flat_comments.append(
                FlatComment(
                    url=f"{page_url}#{panel_id}",
                    author=_author(find_by_class(panel, rules.heading_class), rules),
                    body=text_content(find_by_class(panel, rules.flat_body_class)),
                    timestamp=_position_key(index),
                    reviewee=walk.author,
                )
            )
        else:
            first_id, notes = _thread_notes(panel, rules)
            walk.threads.append(
                Thread(
                    thread_id=first_id or _position_key(index),
                    notes=notes,
                    url=f"{page_url}#{first_id}",
                    timestamp=_position_key(index),
                )
            )

    logger.debug(
        "Walked %d panel(s): %d flat comment(s), %d thread(s)",
        len(panels),
        len(walk.flat_comments),
        len(walk.threads),
    )
    return walk
