# app/api/posts/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app, Response
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from app.api.posts.schemas import (
    PostCreateSchema, PostResponseSchema, LikeToggleSchema, LikeStateSchema,
    ReplyCreateSchema, ReplyResponseSchema,
)
from app.core.exceptions import AuthenticationRequiredError, NotAuthorizedError, ResourceNotFoundError
from app.core.security import current_identity
from app.hub.post_detail import HIGHLIGHT_SECONDS
from app.models.interaction import LikeState

posts_bp = Blueprint('posts_bp', __name__)


def _dump_posts(posts, user_id):
    liked_ids = current_app.services['posts'].liked_post_ids(user_id, [p.post_id for p in posts])
    result = PostResponseSchema(many=True).dump(posts)
    for item in result:
        item['is_liked'] = item['post_id'] in liked_ids
    return result


# --- 피드 ---
@posts_bp.route('', methods=['GET'])
@jwt_required(optional=True)
def get_posts():
    """전체 최신 게시글. q가 있으면 조회 결과 안에서만 필터링합니다."""
    identity = current_identity()
    limit = request.args.get('limit', None, type=int)
    term = request.args.get('q', '', type=str)
    try:
        posts = current_app.services['posts'].get_recent_posts(limit)
        posts = [p for p in posts if p.matches(term)]
        return jsonify({"posts": _dump_posts(posts, identity.user_id if identity else None)}), 200
    except Exception as e:
        logging.error(f"게시물 목록 조회 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Failed to load posts."}), 500

@posts_bp.route('/mine', methods=['GET'])
@jwt_required()
def get_my_posts():
    identity = current_identity()
    limit = request.args.get('limit', None, type=int)
    term = request.args.get('q', '', type=str)
    try:
        posts = current_app.services['posts'].get_posts_by_author(identity.user_id, limit)
        posts = [p for p in posts if p.matches(term)]
        return jsonify({"posts": _dump_posts(posts, identity.user_id)}), 200
    except Exception as e:
        logging.error(f"내 게시물 조회 중 오류 발생 (user_id: {identity.user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Failed to load your posts."}), 500

# --- 게시물 CRUD ---
@posts_bp.route('', methods=['POST'])
@jwt_required()
def create_post():
    identity = current_identity()
    try:
        data = PostCreateSchema().load(request.get_json() or {})
        post = current_app.services['posts'].create_post(
            identity, data['title'], data['description'],
            link=data.get('link'), image_url=data.get('image_url'),
        )
        return jsonify(PostResponseSchema().dump(post)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "message": str(e)}), 400
    except Exception as e:
        logging.error(f"게시물 생성 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Failed to create post."}), 500

@posts_bp.route('/<string:post_id>', methods=['GET'])
@jwt_required(optional=True)
def get_post(post_id):
    """
    게시물 상세. 알림 딥 링크로 들어온 경우 replyId로 강조할 댓글을 지정합니다.
    replyId가 실제 댓글 목록에 없으면 highlight_reply_id는 null입니다.
    """
    identity = current_identity()
    reply_id = request.args.get('replyId', None, type=str)
    try:
        post = current_app.services['posts'].get_post(post_id)
        if not post:
            return jsonify({"error_code": "POST_NOT_FOUND", "message": "Post not found."}), 404
        replies = current_app.services['replies'].list_replies(post_id)
    except Exception as e:
        logging.error(f"게시물 상세 조회 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Failed to load post."}), 500

    highlight = reply_id if reply_id and any(r.reply_id == reply_id for r in replies) else None
    result = PostResponseSchema().dump(post)
    result['is_liked'] = current_app.services['posts'].is_liked(post_id, identity.user_id if identity else None)
    return jsonify({
        "post": result,
        "replies": ReplyResponseSchema(many=True).dump(replies),
        "highlight_reply_id": highlight,
        "highlight_ms": int(HIGHLIGHT_SECONDS * 1000),
    }), 200

@posts_bp.route('/<string:post_id>', methods=['DELETE'])
@jwt_required()
def delete_post(post_id):
    try:
        current_app.services['posts'].delete_post(current_identity(), post_id)
        return Response(status=204)
    except ResourceNotFoundError as e:
        return jsonify({"error_code": e.error_code, "message": e.message}), 404
    except NotAuthorizedError as e:
        return jsonify({"error_code": e.error_code, "message": e.message}), 403
    except Exception as e:
        logging.error(f"게시물 삭제 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Failed to delete post."}), 500

# --- 좋아요 ---
@posts_bp.route('/<string:post_id>/like', methods=['POST'])
@jwt_required()
def toggle_like(post_id):
    """
    클릭 직전 상태 {liked, likes}를 받아 토글합니다.
    확정되면 200과 새 상태, 충돌/실패면 409와 되돌릴 상태를 반환합니다.
    """
    identity = current_identity()
    try:
        previous = LikeState(**LikeToggleSchema().load(request.get_json() or {}))
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    post_service = current_app.services['posts']
    post = post_service.get_post(post_id)
    if not post:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": "Post not found."}), 404

    result = post_service.apply_like(identity, post, previous)
    if result.committed:
        return jsonify(LikeStateSchema().dump(result.new_state)), 200
    return jsonify({
        "error_code": "LIKE_STATE_CONFLICT",
        "message": result.reason,
        "state": LikeStateSchema().dump(result.rollback_state),
    }), 409

# --- 댓글 ---
@posts_bp.route('/<string:post_id>/replies', methods=['GET'])
def get_replies(post_id):
    try:
        replies = current_app.services['replies'].list_replies(post_id)
        return jsonify({"replies": ReplyResponseSchema(many=True).dump(replies)}), 200
    except Exception as e:
        logging.error(f"댓글 목록 조회 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Failed to load replies."}), 500

@posts_bp.route('/<string:post_id>/replies', methods=['POST'])
@jwt_required()
def create_reply(post_id):
    try:
        data = ReplyCreateSchema().load(request.get_json() or {})
        post = current_app.services['posts'].get_post(post_id)
        if not post:
            return jsonify({"error_code": "POST_NOT_FOUND", "message": "Post not found."}), 404
        reply = current_app.services['replies'].add_reply(current_identity(), post, data['text'])
        return jsonify(ReplyResponseSchema().dump(reply)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except AuthenticationRequiredError as e:
        return jsonify({"error_code": e.error_code, "message": e.message}), 401
    except ValueError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "message": str(e)}), 400
    except Exception as e:
        logging.error(f"댓글 생성 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Failed to post reply."}), 500

@posts_bp.route('/<string:post_id>/replies/<string:reply_id>', methods=['DELETE'])
@jwt_required()
def delete_reply(post_id, reply_id):
    try:
        post = current_app.services['posts'].get_post(post_id)
        if not post:
            return jsonify({"error_code": "POST_NOT_FOUND", "message": "Post not found."}), 404
        current_app.services['replies'].delete_reply(current_identity(), post, reply_id)
        return Response(status=204)
    except ResourceNotFoundError as e:
        return jsonify({"error_code": e.error_code, "message": e.message}), 404
    except NotAuthorizedError as e:
        return jsonify({"error_code": e.error_code, "message": e.message}), 403
    except Exception as e:
        logging.error(f"댓글 삭제 중 오류 발생 (reply_id: {reply_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Failed to delete reply."}), 500
