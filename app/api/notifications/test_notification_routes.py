# app/api/notifications/test_notification_routes.py
"""
알림 API 테스트

사용법: python -m pytest app/api/notifications/test_notification_routes.py -v
"""


def test_notifications_flow(client, auth_headers):
    alice = auth_headers("alice-token")
    bob = auth_headers("bob-token")

    post = client.post('/api/posts', json={"title": "Alpha Launch"}, headers=alice).get_json()
    client.post(f"/api/posts/{post['post_id']}/like", json={"liked": False, "likes": 0}, headers=bob)
    reply = client.post(f"/api/posts/{post['post_id']}/replies", json={"text": "Congrats!"}, headers=bob).get_json()

    # 본인 게시물에 본인이 남긴 댓글은 알림이 없음
    client.post(f"/api/posts/{post['post_id']}/replies", json={"text": "thanks"}, headers=alice)

    body = client.get('/api/notifications', headers=alice).get_json()
    assert body['unread_count'] == 2
    types = sorted(n['type'] for n in body['notifications'])
    assert types == ["like", "reply"]

    reply_item = next(n for n in body['notifications'] if n['type'] == "reply")
    assert reply_item['link'] == f"/post/{post['post_id']}?replyId={reply['reply_id']}"
    assert reply_item['actor']['user_id'] == "bob"

    response = client.post(f"/api/notifications/{reply_item['notification_id']}/read", headers=alice)
    assert response.status_code == 200
    assert client.get('/api/notifications', headers=alice).get_json()['unread_count'] == 1

    response = client.post('/api/notifications/read-all', headers=alice)
    assert response.get_json() == {"updated": 1}
    assert client.get('/api/notifications', headers=alice).get_json()['unread_count'] == 0

    assert client.get('/api/notifications', headers=bob).get_json()['notifications'] == []


def test_mark_unknown_notification(client, auth_headers):
    response = client.post('/api/notifications/missing/read', headers=auth_headers("alice-token"))
    assert response.status_code == 404
