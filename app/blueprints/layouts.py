"""Board and service blueprints — /boards/* and /services/*

Both families expose the same drag-and-drop JSON API, built by
_build_blueprint() around their repositioning engine. "Lanes" are board
lists or service stages; "items" are applications.

Route Map (shown for /boards, identical under /services):
  GET    /boards                               — Owner's boards, by position
  POST   /boards                               — Create board (+ default lists)
  PUT    /boards/positions                     — Sync board positions
  GET    /boards/<id>                          — Full layout JSON
  PATCH  /boards/<id>                          — Rename / recolor board
  DELETE /boards/<id>                          — Delete board, detach applications
  POST   /boards/<id>/star                     — Toggle starred
  POST   /boards/<id>/lanes                    — Create list
  PATCH  /boards/<id>/lanes/<lane_id>          — Rename / recolor list
  PUT    /boards/<id>/lanes/positions          — Sync list positions
  DELETE /boards/<id>/lanes/<lane_id>          — Delete list, unassign applications
  POST   /boards/<id>/items                    — Add application to end of a list
  PUT    /boards/<id>/items/move               — Drag application to list + index
  DELETE /boards/<id>/items/<application_id>   — Remove application from board

All routes resolve the acting user via @actor_required and pass it
explicitly to the engine. Errors are JSON: {"error": "..."}; a failed move
also returns the last committed layout under "layout".
"""

import logging

from flask import Blueprint, g, jsonify, request

from app.decorators import actor_required
from app.errors import AppError
from app.extensions import limiter
from app.services.layouts import board_engine, service_engine

logger = logging.getLogger(__name__)


def _item_dict(engine, item):
    return {
        "id": item.id,
        "application_number": item.application_number,
        "title": item.title,
        "status": item.status,
        "priority": item.priority,
        "due_date": item.due_date.isoformat() if item.due_date else None,
        "is_starred": bool(item.is_starred),
        "container_id": engine.container_id_of(item),
        "lane_id": engine.lane_id_of(item),
        "position": engine.position_of(item),
    }


def _lane_dict(engine, lane, items=None):
    data = {
        "id": lane.id,
        "container_id": getattr(lane, engine.family.lane_container_attr),
        "name": lane.name,
        "color": lane.color,
        "position": lane.position,
    }
    if items is not None:
        data["items"] = [_item_dict(engine, i) for i in items]
    return data


def _container_dict(engine, container, with_counts=False):
    data = {
        "id": container.id,
        "owner_id": container.user_id,
        "name": container.name,
        "description": container.description,
        "color": container.color,
        "is_starred": bool(container.is_starred),
        "position": container.position,
        "created_at": container.created_at.isoformat() if container.created_at else None,
    }
    if with_counts:
        data["lanes_count"] = len(engine.lanes_of(container.id))
        data["items_count"] = engine.count_items(container)
    return data


def _layout_dict(engine, layout):
    data = _container_dict(engine, layout["container"])
    data["lanes"] = [_lane_dict(engine, lane, items) for lane, items in layout["lanes"]]
    data["unassigned"] = [_item_dict(engine, i) for i in layout["unassigned"]]
    data["available"] = [_item_dict(engine, i) for i in layout["available"]]
    return data


def _build_blueprint(name, url_prefix, engine):
    bp = Blueprint(name, __name__, url_prefix=url_prefix)
    noun = engine.family.key

    @bp.errorhandler(AppError)
    def handle_app_error(e):
        return jsonify({"error": e.message}), e.status_code

    def _payload():
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    # ─── Containers ──────────────────────────────────────────────

    @bp.route("", methods=["GET"])
    @actor_required
    def index():
        containers = engine.list_containers(g.actor_id)
        return jsonify([_container_dict(engine, c, with_counts=True) for c in containers])

    @bp.route("", methods=["POST"])
    @actor_required
    @limiter.limit("30 per minute")
    def create():
        data = _payload()
        container = engine.create_container(
            g.actor_id,
            data.get("name"),
            description=data.get("description"),
            color=data.get("color"),
        )
        return jsonify(_layout_dict(engine, engine.get_layout(g.actor_id, container.id))), 201

    @bp.route("/positions", methods=["PUT"])
    @actor_required
    def sync_positions():
        applied = engine.sync_container_positions(g.actor_id, _payload().get("positions"))
        return jsonify({"success": True, "updated": applied})

    @bp.route("/<container_id>", methods=["GET"])
    @actor_required
    def show(container_id):
        return jsonify(_layout_dict(engine, engine.get_layout(g.actor_id, container_id)))

    @bp.route("/<container_id>", methods=["PATCH"])
    @actor_required
    def update(container_id):
        data = _payload()
        container = engine.update_container(
            g.actor_id,
            container_id,
            name=data.get("name"),
            description=data.get("description"),
            color=data.get("color"),
        )
        return jsonify(_container_dict(engine, container))

    @bp.route("/<container_id>", methods=["DELETE"])
    @actor_required
    def destroy(container_id):
        detached = engine.delete_container(g.actor_id, container_id)
        return jsonify({"success": True, "detached": detached})

    @bp.route("/<container_id>/star", methods=["POST"])
    @actor_required
    def toggle_star(container_id):
        container = engine.toggle_star(g.actor_id, container_id)
        return jsonify(_container_dict(engine, container))

    # ─── Lanes ───────────────────────────────────────────────────

    @bp.route("/<container_id>/lanes", methods=["POST"])
    @actor_required
    def create_lane(container_id):
        data = _payload()
        lane = engine.create_lane(
            g.actor_id, container_id, data.get("name"), color=data.get("color")
        )
        return jsonify(_lane_dict(engine, lane, [])), 201

    @bp.route("/<container_id>/lanes/positions", methods=["PUT"])
    @actor_required
    def sync_lane_positions(container_id):
        applied = engine.sync_lane_positions(
            g.actor_id, container_id, _payload().get("positions")
        )
        return jsonify({"success": True, "updated": applied})

    @bp.route("/<container_id>/lanes/<lane_id>", methods=["PATCH"])
    @actor_required
    def update_lane(container_id, lane_id):
        data = _payload()
        lane = engine.update_lane(
            g.actor_id, container_id, lane_id, name=data.get("name"), color=data.get("color")
        )
        return jsonify(_lane_dict(engine, lane))

    @bp.route("/<container_id>/lanes/<lane_id>", methods=["DELETE"])
    @actor_required
    def destroy_lane(container_id, lane_id):
        detached = engine.delete_lane(g.actor_id, lane_id, container_id=container_id)
        return jsonify({"success": True, "detached": detached})

    # ─── Items ───────────────────────────────────────────────────

    @bp.route("/<container_id>/items", methods=["POST"])
    @actor_required
    def add_item(container_id):
        data = _payload()
        lane_id = data.get("lane_id")
        items = engine.add_item(
            g.actor_id, data.get("application_id"), lane_id, container_id=container_id
        )
        return jsonify({"lane_id": lane_id, "items": [_item_dict(engine, i) for i in items]}), 201

    @bp.route("/<container_id>/items/move", methods=["PUT"])
    @actor_required
    def move_item(container_id):
        data = _payload()
        try:
            source_items, target_items = engine.move_item(
                g.actor_id,
                container_id,
                data.get("application_id"),
                data.get("lane_id"),
                data.get("position"),
            )
        except AppError as e:
            logger.info(f"{noun} move rejected for user {g.actor_id}: {e.message}")
            body = {"error": e.message}
            # Let the client snap back to what is actually persisted
            try:
                body["layout"] = _layout_dict(engine, engine.get_layout(g.actor_id, container_id))
            except AppError:
                pass
            return jsonify(body), e.status_code

        return jsonify({
            "success": True,
            "source": [_item_dict(engine, i) for i in source_items],
            "target": [_item_dict(engine, i) for i in target_items],
        })

    @bp.route("/<container_id>/items/<item_id>", methods=["DELETE"])
    @actor_required
    def detach_item(container_id, item_id):
        item = engine.detach_item(g.actor_id, item_id, container_id=container_id)
        return jsonify(_item_dict(engine, item))

    return bp


boards_bp = _build_blueprint("boards", "/boards", board_engine)
services_bp = _build_blueprint("services", "/services", service_engine)
