"""Tests for the DOM helpers and the GitBucket comment panel walker."""

import pytest

from prharvest_core.errors import DataShapeError
from prharvest_core.html.dom import (
    Node,
    child_elements,
    find_by_attr,
    find_by_class,
    find_by_id,
    from_markup,
    has_class,
    iter_elements,
    text_content,
)
from prharvest_core.html.panels import PanelRules, walk_comment_list

PAGE_URL = "https://gitbucket.example.com/org/repo/pull/3"

PR_PAGE = """
<html><body>
<div id="comment-list">
  <div class="panel panel-default">
    <div class="panel-heading"><a class="username strong" href="/author">author</a> opened</div>
    <div class="panel-body markdown-body"><p>Description</p></div>
  </div>
  <div class="panel panel-default" id="comment-11">
    <div class="panel-heading"><a class="username strong" href="/rev">rev</a> commented</div>
    <div class="panel-body markdown-body"><p>Rename this.</p><p>~~</p><p>Done.</p></div>
  </div>
  <div class="panel panel-default">
    <div class="panel-heading"><span class="muted">rev referenced the  pull request</span></div>
    <div class="panel-body">
      <div id="discussion_r1">
        <div class="markdown-body">
          <div><a class="username strong">rev</a></div>
          <div><p>merge commit noise</p></div>
        </div>
      </div>
    </div>
  </div>
  <div class="panel panel-default">
    <div class="panel-heading"><a class="username strong">rev</a> commented on src/app.py</div>
    <div class="panel-body">
      <div id="discussion_r7">
        <div class="markdown-body">
          <div><a class="username strong">rev</a></div>
          <div><p>Off by one.</p></div>
        </div>
      </div>
      <div id="discussion_r8">
        <div class="markdown-body">
          <div><a class="username strong">author</a></div>
          <div><p>Fixed.</p></div>
        </div>
      </div>
    </div>
  </div>
</div>
</body></html>
"""


class TestDom:
    def test_from_markup_builds_tree(self):
        root = from_markup('<div id="a" class="x y"><p>hi<!-- note --></p></div>')
        div = find_by_id(root, "a")
        assert div.tag == "div"
        assert div.attrs["class"] == "x y"
        assert text_content(div) == "hi"

    def test_iter_elements_document_order(self):
        root = from_markup('<div id="top"><span></span><p><b></b></p></div>')
        assert [n.tag for n in iter_elements(find_by_id(root, "top"))] == ["div", "span", "p", "b"]

    def test_find_by_attr_exact_match(self):
        root = from_markup('<div class="panel-body markdown-body"></div><div class="panel-body"></div>')
        assert find_by_class(root, "panel-body").attrs["class"] == "panel-body"
        assert find_by_attr(root, "class", "markdown-body") is None

    def test_has_class_substring(self):
        assert has_class(Node("div", {"class": "panel panel-default"}), "panel") is True
        assert has_class(Node("div"), "panel") is False
        assert has_class(None, "panel") is False

    def test_child_elements_only_direct_divs(self):
        root = from_markup('<section id="s"><div><div></div></div><p></p><div></div></section>')
        section = find_by_id(root, "s")
        assert len(child_elements(section)) == 2

    def test_text_content_joins_lines(self):
        root = from_markup("<ul><li>one</li>\n  <li>two</li></ul>")
        assert text_content(root) == "one\ntwo"

    def test_helpers_accept_none(self):
        assert find_by_id(None, "x") is None
        assert child_elements(None) == []
        assert text_content(None) == ""
        assert list(iter_elements(None)) == []


class TestWalkCommentList:
    def test_author_from_description_panel(self):
        walk = walk_comment_list(from_markup(PR_PAGE), PAGE_URL)
        assert walk.author == "author"

    def test_flat_comment(self):
        walk = walk_comment_list(from_markup(PR_PAGE), PAGE_URL)
        (comment,) = walk.flat_comments
        assert comment.url == f"{PAGE_URL}#comment-11"
        assert comment.author == "rev"
        assert comment.body == "Rename this.\n~~\nDone."
        assert comment.reviewee == "author"

    def test_merge_event_panel_skipped(self):
        walk = walk_comment_list(from_markup(PR_PAGE), PAGE_URL)
        assert len(walk.threads) == 1
        assert "merge commit noise" not in [n.body for t in walk.threads for n in t.notes]

    def test_thread_notes(self):
        walk = walk_comment_list(from_markup(PR_PAGE), PAGE_URL)
        (thread,) = walk.threads
        assert thread.thread_id == "discussion_r7"
        assert thread.url == f"{PAGE_URL}#discussion_r7"
        assert [(n.author, n.body) for n in thread.notes] == [("rev", "Off by one."), ("author", "Fixed.")]

    def test_positional_order_keys(self):
        walk = walk_comment_list(from_markup(PR_PAGE), PAGE_URL)
        assert walk.flat_comments[0].timestamp == "00000001"
        assert walk.threads[0].timestamp == "00000003"

    def test_missing_container_raises(self):
        with pytest.raises(DataShapeError, match="comment-list"):
            walk_comment_list(from_markup("<html><body><p>Sign in</p></body></html>"), PAGE_URL)

    def test_empty_container_raises(self):
        with pytest.raises(DataShapeError):
            walk_comment_list(from_markup('<div id="comment-list"></div>'), PAGE_URL)

    def test_custom_rules(self):
        markup = """
        <div id="comments">
          <div class="box"><div class="head"><a class="user">me</a></div></div>
          <div class="box" id="c1"><div class="head"><a class="user">you</a></div><div class="text">hello</div></div>
        </div>
        """
        rules = PanelRules(
            container_id="comments",
            panel_class="box",
            heading_class="head",
            username_class="user",
            flat_body_class="text",
        )
        walk = walk_comment_list(from_markup(markup), PAGE_URL, rules)
        assert walk.author == "me"
        assert walk.flat_comments[0].body == "hello"
