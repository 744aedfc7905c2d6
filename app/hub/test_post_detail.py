# app/hub/test_post_detail.py
"""
게시물 상세 화면/딥 링크 테스트

사용법: python -m pytest app/hub/test_post_detail.py -v
"""

import pytest

from app.hub.post_detail import HIGHLIGHT_SECONDS, PostDetailView, parse_deep_link


class FakeTimer:
    """threading.Timer 대역. fire()를 호출해야만 콜백이 실행됩니다."""

    def __init__(self, seconds, fn):
        self.seconds = seconds
        self.fn = fn
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.fn()


@pytest.fixture
def timers():
    return []


@pytest.fixture
def view(post_service, reply_service, provider, toaster, timers):
    def _factory(seconds, fn):
        timer = FakeTimer(seconds, fn)
        timers.append(timer)
        return timer
    detail = PostDetailView(post_service, reply_service, provider, toaster, timer_factory=_factory)
    yield detail
    detail.close()


def test_parse_deep_link():
    assert parse_deep_link("/post/abc?replyId=r1") == ("abc", "r1")
    assert parse_deep_link("/post/abc") == ("abc", None)
    assert parse_deep_link("/post/abc?replyId=") == ("abc", None)
    assert parse_deep_link("/profile/abc") == (None, None)
    assert parse_deep_link("") == (None, None)


def test_missing_post_is_not_found_without_toast(view, toaster):
    assert view.load("missing") is False
    assert view.not_found is True
    assert view.engine is None
    assert toaster.messages == []


def test_store_error_sets_error(view, post_service, monkeypatch):
    def _boom(post_id):
        raise RuntimeError("offline")
    monkeypatch.setattr(post_service, "get_post", _boom)

    assert view.load("p1") is False
    assert view.error == "Failed to load post."
    assert view.loading is False


def test_deep_link_highlights_reply_for_three_seconds(view, post_service, reply_service, alice, bob, timers):
    post = post_service.create_post(alice, "Alpha Launch", "")
    reply_service.add_reply(bob, post, "first")
    target = reply_service.add_reply(bob, post, "second")

    assert view.open_link(f"/post/{post.post_id}?replyId={target.reply_id}")
    assert view.engine.replies_expanded and view.engine.replies_fetched
    assert [r.text for r in view.engine.replies] == ["first", "second"]
    assert view.highlighted_reply_id == target.reply_id

    assert len(timers) == 1
    assert timers[0].seconds == HIGHLIGHT_SECONDS == 3.0
    assert timers[0].started

    timers[0].fire()
    assert view.highlighted_reply_id is None


def test_unknown_reply_is_not_highlighted(view, post_service, alice, timers):
    post = post_service.create_post(alice, "Alpha Launch", "")

    assert view.load(post.post_id, "does-not-exist")
    assert view.highlighted_reply_id is None
    assert timers == []


def test_reload_cancels_previous_highlight(view, post_service, reply_service, alice, bob, timers):
    post = post_service.create_post(alice, "Alpha Launch", "")
    reply = reply_service.add_reply(bob, post, "hello")

    view.load(post.post_id, reply.reply_id)
    view.load(post.post_id)

    assert timers[0].cancelled
    assert view.highlighted_reply_id is None


def test_deleting_post_from_detail_marks_not_found(view, post_service, provider, alice):
    post = post_service.create_post(alice, "Alpha Launch", "")
    provider.sign_in(alice)
    view.load(post.post_id)

    view.engine.request_delete_post()
    assert view.engine.confirm_delete_post()
    assert view.not_found
    assert view.engine is None
