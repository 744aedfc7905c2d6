# app/api/posts/test_post_routes.py
"""
게시물/좋아요/댓글 API 테스트 (Flask 테스트 클라이언트 + 메모리 저장소)

사용법: python -m pytest app/api/posts/test_post_routes.py -v
"""

import pytest


@pytest.fixture
def alice_headers(auth_headers):
    return auth_headers("alice-token")


@pytest.fixture
def bob_headers(auth_headers):
    return auth_headers("bob-token")


def create_post(client, headers, **body):
    response = client.post('/api/posts', json=body, headers=headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def test_create_post(client, alice_headers, store):
    post = create_post(client, alice_headers, title="T", description="D")

    assert post['title'] == "T"
    assert post['description'] == "D"
    assert post['image_url'] is None
    assert post['link'] is None
    assert post['likes'] == 0
    assert post['author']['user_id'] == "alice"
    assert post['author']['display_name'] == "Alice"
    assert store.get(f"posts/{post['post_id']}").to_dict()['authorId'] == "alice"


def test_create_post_validation(client, alice_headers):
    response = client.post('/api/posts', json={"title": " ", "description": ""}, headers=alice_headers)
    assert response.status_code == 400
    assert response.get_json()['error_code'] == "VALIDATION_ERROR"


def test_create_post_requires_login(client):
    response = client.post('/api/posts', json={"title": "T"})
    assert response.status_code == 401


def test_feed_search_and_mine(client, alice_headers, bob_headers):
    create_post(client, alice_headers, title="Alpha Launch")
    create_post(client, bob_headers, title="Beta")

    everything = client.get('/api/posts').get_json()['posts']
    assert len(everything) == 2

    searched = client.get('/api/posts?q=alp').get_json()['posts']
    assert [p['title'] for p in searched] == ["Alpha Launch"]

    mine = client.get('/api/posts/mine', headers=bob_headers).get_json()['posts']
    assert [p['title'] for p in mine] == ["Beta"]

    mine_searched = client.get('/api/posts/mine?q=alp', headers=alice_headers).get_json()['posts']
    assert [p['title'] for p in mine_searched] == ["Alpha Launch"]


def test_like_unlike_and_conflict(client, alice_headers, bob_headers, store):
    post = create_post(client, alice_headers, title="Alpha Launch")
    url = f"/api/posts/{post['post_id']}/like"

    response = client.post(url, json={"liked": False, "likes": 0}, headers=bob_headers)
    assert response.status_code == 200
    assert response.get_json() == {"liked": True, "likes": 1}

    listed = client.get('/api/posts', headers=bob_headers).get_json()['posts']
    assert listed[0]['is_liked'] is True
    assert listed[0]['likes'] == 1

    # 같은 전제로 다시 보내면 충돌 -> 409 + 되돌릴 상태
    response = client.post(url, json={"liked": False, "likes": 0}, headers=bob_headers)
    assert response.status_code == 409
    body = response.get_json()
    assert body['error_code'] == "LIKE_STATE_CONFLICT"
    assert body['state'] == {"liked": False, "likes": 0}
    assert store.get(f"posts/{post['post_id']}").to_dict()['likes'] == 1

    response = client.post(url, json={"liked": True, "likes": 1}, headers=bob_headers)
    assert response.status_code == 200
    assert response.get_json() == {"liked": False, "likes": 0}
    assert store.count(f"posts/{post['post_id']}/likes") == 0


def test_like_reports_stored_counter_not_client_counter(client, alice_headers, bob_headers, store):
    post = create_post(client, alice_headers, title="Alpha Launch")
    url = f"/api/posts/{post['post_id']}/like"

    response = client.post(url, json={"liked": False, "likes": 999}, headers=bob_headers)
    assert response.status_code == 200
    assert response.get_json() == {"liked": True, "likes": 1}
    assert store.get(f"posts/{post['post_id']}").to_dict()['likes'] == 1

    response = client.post(url, json={"liked": True, "likes": 0}, headers=bob_headers)
    assert response.status_code == 200
    assert response.get_json() == {"liked": False, "likes": 0}


def test_like_missing_post(client, bob_headers):
    response = client.post('/api/posts/nope/like', json={"liked": False, "likes": 0}, headers=bob_headers)
    assert response.status_code == 404


def test_replies_and_detail_highlight(client, alice_headers, bob_headers):
    post = create_post(client, alice_headers, title="Alpha Launch")
    replies_url = f"/api/posts/{post['post_id']}/replies"

    response = client.post(replies_url, json={"text": "   "}, headers=bob_headers)
    assert response.status_code == 400

    response = client.post(replies_url, json={"text": "Congrats!"}, headers=bob_headers)
    assert response.status_code == 201
    reply = response.get_json()
    assert reply['text'] == "Congrats!"
    assert reply['author']['user_id'] == "bob"

    replies = client.get(replies_url).get_json()['replies']
    assert [r['reply_id'] for r in replies] == [reply['reply_id']]

    detail = client.get(f"/api/posts/{post['post_id']}?replyId={reply['reply_id']}").get_json()
    assert detail['highlight_reply_id'] == reply['reply_id']
    assert detail['highlight_ms'] == 3000
    assert detail['post']['is_liked'] is False

    detail = client.get(f"/api/posts/{post['post_id']}?replyId=unknown").get_json()
    assert detail['highlight_reply_id'] is None


def test_detail_not_found(client):
    response = client.get('/api/posts/missing')
    assert response.status_code == 404


def test_reply_delete_permissions(client, alice_headers, bob_headers, auth_headers):
    carol_headers = auth_headers("carol-token")

    post = create_post(client, alice_headers, title="Alpha Launch")
    replies_url = f"/api/posts/{post['post_id']}/replies"
    reply = client.post(replies_url, json={"text": "hi"}, headers=bob_headers).get_json()

    response = client.delete(f"{replies_url}/{reply['reply_id']}", headers=carol_headers)
    assert response.status_code == 403
    assert len(client.get(replies_url).get_json()['replies']) == 1

    response = client.delete(f"{replies_url}/{reply['reply_id']}", headers=alice_headers)
    assert response.status_code == 204
    assert client.get(replies_url).get_json()['replies'] == []


def test_delete_post_only_by_author(client, alice_headers, bob_headers):
    post = create_post(client, alice_headers, title="Alpha Launch")
    url = f"/api/posts/{post['post_id']}"

    assert client.delete(url, headers=bob_headers).status_code == 403
    assert client.delete(url, headers=alice_headers).status_code == 204
    assert client.get(url).status_code == 404
    assert client.delete(url, headers=alice_headers).status_code == 404
