"""Repositioning engine — ordered lanes and applications for boards and services.

One engine serves both layout families:

    Board   -> BoardList    -> Application.board_id / board_list_id / board_position
    Service -> ServiceStage -> Application.service_id / service_stage_id / service_position

A LayoutFamily describes which models and columns play the container, lane
and item-placement roles; RepositioningEngine implements every operation
against that description (see services/layouts.py for the two instances).

Ordering rules:
- Containers and lanes keep whatever positions the owner syncs; new ones
  go to max(position) + 1 (0 when there are none).
- Items in a lane are renumbered to 0..n-1 after every move, add or detach,
  so a lane's positions are always contiguous after a completed operation.
- Lane and board deletion detach applications (container/lane cleared,
  position 0), never delete them.

Every mutating operation takes the acting user's id explicitly, re-checks
ownership server-side, and runs inside a single atomic() unit of work.
Lanes touched by an item move are locked FOR UPDATE (in id order) so two
concurrent drags on the same lane serialize instead of interleaving.
"""

import logging
import re

import bleach
from flask import current_app
from sqlalchemy import or_

from app.errors import AuthorizationError, NotFoundError, PersistenceError, ValidationError
from app.extensions import db
from app.models.application import Application
from app.models.audit import AuditEvent
from app.services.application_service import add_to_timeline
from app.services.transaction import atomic

logger = logging.getLogger(__name__)

HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")
MAX_NAME_LENGTH = 255


class LayoutFamily:
    """Maps the container/lane/item roles onto concrete models and columns."""

    def __init__(self, key, lane_key, container_model, lane_model,
                 lane_container_attr, item_container_attr, item_lane_attr,
                 item_position_attr):
        self.key = key                      # "board" | "service"
        self.lane_key = lane_key            # "list" | "stage"
        self.container_model = container_model
        self.lane_model = lane_model
        self.lane_container_attr = lane_container_attr
        self.item_container_attr = item_container_attr
        self.item_lane_attr = item_lane_attr
        self.item_position_attr = item_position_attr

    @property
    def lane_container_column(self):
        return getattr(self.lane_model, self.lane_container_attr)

    @property
    def item_container_column(self):
        return getattr(Application, self.item_container_attr)

    @property
    def item_lane_column(self):
        return getattr(Application, self.item_lane_attr)

    @property
    def item_position_column(self):
        return getattr(Application, self.item_position_attr)

    def __repr__(self):
        return f"<LayoutFamily {self.key}/{self.lane_key}>"


class RepositioningEngine:
    """All board/service layout operations for one LayoutFamily."""

    def __init__(self, family):
        self.family = family

    # ─── Placement accessors ──────────────────────────────────────

    def container_id_of(self, item):
        return getattr(item, self.family.item_container_attr)

    def lane_id_of(self, item):
        return getattr(item, self.family.item_lane_attr)

    def position_of(self, item):
        return getattr(item, self.family.item_position_attr)

    def _set_position(self, item, position):
        setattr(item, self.family.item_position_attr, position)

    def _place(self, item, container_id, lane_id, position):
        setattr(item, self.family.item_container_attr, container_id)
        setattr(item, self.family.item_lane_attr, lane_id)
        setattr(item, self.family.item_position_attr, position)

    def _detach(self, item):
        self._place(item, None, None, 0)

    def _lane_container_id(self, lane):
        return getattr(lane, self.family.lane_container_attr)

    # ─── Input validation ─────────────────────────────────────────

    @staticmethod
    def _clean_name(name, what):
        if name is not None and not isinstance(name, str):
            raise ValidationError(f"{what.capitalize()} name must be text.")
        cleaned = bleach.clean(name or "", tags=[], strip=True).strip()
        if not cleaned:
            raise ValidationError(f"{what.capitalize()} name is required.")
        if len(cleaned) > MAX_NAME_LENGTH:
            raise ValidationError(
                f"{what.capitalize()} name must be at most {MAX_NAME_LENGTH} characters."
            )
        return cleaned

    @staticmethod
    def _clean_color(color, default):
        if color is None or color == "":
            return default
        if not isinstance(color, str) or not HEX_COLOR_RE.match(color):
            raise ValidationError("Color must be a hex value like #3b82f6.")
        return color.lower()

    @staticmethod
    def _require_id(value, what):
        if value is None or value == "" or isinstance(value, bool):
            raise ValidationError(f"{what} is required.")
        return str(value)

    @staticmethod
    def _require_index(value, what="position"):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{what.capitalize()} must be an integer.")
        if value < 0:
            raise ValidationError(f"{what.capitalize()} must not be negative.")
        return value

    def _clean_positions(self, positions):
        """Validate a [{"id": ..., "position": n}, ...] batch."""
        if not isinstance(positions, list) or not positions:
            raise ValidationError("positions must be a non-empty list.")
        # a repeated id keeps its last position
        cleaned = {}
        for entry in positions:
            if not isinstance(entry, dict):
                raise ValidationError("Each position entry must be an object.")
            row_id = self._require_id(entry.get("id"), "id")
            cleaned[row_id] = self._require_index(entry.get("position"))
        return list(cleaned.items())

    # ─── Scoped lookups ───────────────────────────────────────────

    def _container_for(self, owner_id, container_id):
        container = db.session.get(self.family.container_model, container_id)
        if container is None:
            raise NotFoundError(f"{self.family.key.capitalize()} not found.")
        if container.user_id != owner_id:
            raise AuthorizationError()
        return container

    def _lane_for(self, owner_id, lane_id):
        lane = db.session.get(self.family.lane_model, lane_id)
        if lane is None:
            raise NotFoundError(f"{self.family.lane_key.capitalize()} not found.")
        self._container_for(owner_id, self._lane_container_id(lane))
        return lane

    def _item_for(self, owner_id, item_id):
        """Load an application the owner may place.

        A placed application is reachable through its container's owner; an
        unplaced one only by the user who owns the application.
        """
        item = db.session.get(Application, item_id)
        if item is None:
            raise NotFoundError("Application not found.")
        container_id = self.container_id_of(item)
        if container_id is not None:
            self._container_for(owner_id, container_id)
        elif item.user_id != owner_id:
            raise AuthorizationError()
        return item

    # ─── Ordering primitives ──────────────────────────────────────

    def lane_items(self, lane_id, exclude_id=None):
        """Applications in a lane, in visual order."""
        query = Application.query.filter(self.family.item_lane_column == lane_id)
        if exclude_id is not None:
            query = query.filter(Application.id != exclude_id)
        return query.order_by(
            self.family.item_position_column,
            Application.created_at,
            Application.id,
        ).all()

    def _renumber(self, items):
        """Rewrite positions to 0..n-1 in list order. Returns rows changed."""
        changed = 0
        for index, item in enumerate(items):
            if self.position_of(item) != index:
                self._set_position(item, index)
                changed += 1
        return changed

    def _lock_lanes(self, *lane_ids):
        ids = sorted({lane_id for lane_id in lane_ids if lane_id is not None})
        if not ids:
            return []
        return (
            self.family.lane_model.query
            .filter(self.family.lane_model.id.in_(ids))
            .order_by(self.family.lane_model.id)
            .with_for_update()
            .all()
        )

    def _item_lock_query(self, item_id):
        return (
            Application.query
            .filter(Application.id == item_id)
            .with_for_update()
            .populate_existing()
        )

    def _lock_for_item(self, item, *lane_ids):
        """Lock the item's current lane plus ``lane_ids``, then the item row.

        Lanes are locked before the item, matching the lane deletion paths.
        Locking the item row also serializes moves of an application that is
        not in any lane yet. Fails if another request moved the item between
        the read and the lock.
        """
        seen_lane_id = self.lane_id_of(item)
        self._lock_lanes(seen_lane_id, *lane_ids)
        self._item_lock_query(item.id).one()
        if self.lane_id_of(item) != seen_lane_id:
            raise PersistenceError(
                "Application was moved by another request. Reload and try again."
            )

    def _next_position(self, column, *criteria):
        max_pos = db.session.query(db.func.max(column)).filter(*criteria).scalar()
        return 0 if max_pos is None else max_pos + 1

    def _audit(self, owner_id, action, **metadata):
        db.session.add(AuditEvent(
            actor_user_id=owner_id,
            action=f"{self.family.key}.{action}",
            metadata_=metadata,
        ))

    # ─── Containers ───────────────────────────────────────────────

    def list_containers(self, owner_id):
        model = self.family.container_model
        return (
            model.query
            .filter_by(user_id=owner_id)
            .order_by(model.position, model.created_at)
            .all()
        )

    def count_items(self, container):
        return Application.query.filter(
            self.family.item_container_column == container.id
        ).count()

    def lanes_of(self, container_id):
        model = self.family.lane_model
        return (
            model.query
            .filter(self.family.lane_container_column == container_id)
            .order_by(model.position, model.created_at)
            .all()
        )

    def create_container(self, owner_id, name, description=None, color=None):
        """Create a container with the default lanes (To Do / In Progress / Done)."""
        what = self.family.key
        name = self._clean_name(name, what)
        color = self._clean_color(color, current_app.config["DEFAULT_CONTAINER_COLOR"])
        if description is not None:
            description = bleach.clean(description, tags=[], strip=True).strip() or None

        model = self.family.container_model
        with atomic(f"create {what}"):
            container = model(
                user_id=owner_id,
                name=name,
                description=description,
                color=color,
                position=self._next_position(model.position, model.user_id == owner_id),
            )
            db.session.add(container)
            db.session.flush()

            lane_color = current_app.config["DEFAULT_LANE_COLOR"]
            for index, lane_name in enumerate(current_app.config["DEFAULT_LANE_NAMES"]):
                db.session.add(self.family.lane_model(
                    name=lane_name,
                    color=lane_color,
                    position=index,
                    **{self.family.lane_container_attr: container.id},
                ))
            self._audit(owner_id, "created", container_id=container.id, name=name)

        logger.info(f"Created {what} {container.id} for user {owner_id}")
        return container

    def toggle_star(self, owner_id, container_id):
        with atomic(f"star {self.family.key}"):
            container = self._container_for(owner_id, container_id)
            container.is_starred = not container.is_starred
        logger.info(f"Set {self.family.key} {container_id} starred={container.is_starred}")
        return container

    def update_container(self, owner_id, container_id, name=None, description=None,
                         color=None):
        """Rename, re-describe or recolor a container.

        Arguments left as None keep their current value; an empty
        description clears it and an empty color restores the default.
        """
        what = self.family.key
        changes = {}
        if name is not None:
            changes["name"] = self._clean_name(name, what)
        if description is not None:
            if not isinstance(description, str):
                raise ValidationError("Description must be text.")
            changes["description"] = bleach.clean(description, tags=[], strip=True).strip() or None
        if color is not None:
            changes["color"] = self._clean_color(
                color, current_app.config["DEFAULT_CONTAINER_COLOR"]
            )

        with atomic(f"update {what}"):
            container = self._container_for(owner_id, container_id)
            for field, value in changes.items():
                setattr(container, field, value)
            self._audit(
                owner_id, "updated", container_id=container.id, fields=sorted(changes)
            )

        logger.info(f"Updated {what} {container_id}: {', '.join(sorted(changes)) or 'no changes'}")
        return container

    def delete_container(self, owner_id, container_id):
        """Delete a container and its lanes; its applications are detached.

        Returns the number of applications detached.
        """
        what = self.family.key
        with atomic(f"delete {what}"):
            container = self._container_for(owner_id, container_id)
            lane_ids = [lane.id for lane in self.lanes_of(container.id)]
            self._lock_lanes(*lane_ids)

            criteria = [self.family.item_container_column == container.id]
            if lane_ids:
                criteria.append(self.family.item_lane_column.in_(lane_ids))
            items = Application.query.filter(or_(*criteria)).all()
            for item in items:
                self._detach(item)
                add_to_timeline(
                    item, owner_id, f"removed_from_{what}",
                    f"Removed from {what} {container.name} ({what} deleted)",
                    {f"{what}_id": container.id},
                )
            db.session.flush()

            self._audit(
                owner_id, "deleted",
                container_id=container.id, name=container.name,
                detached=len(items),
            )
            db.session.delete(container)

        logger.info(f"Deleted {what} {container_id}, detached {len(items)} applications")
        return len(items)

    def sync_container_positions(self, owner_id, positions):
        """Persist owner-supplied container positions verbatim.

        Rows that do not exist or belong to someone else are skipped.
        Returns the ids that were updated.
        """
        pairs = self._clean_positions(positions)
        model = self.family.container_model
        applied = []
        with atomic(f"update {self.family.key} positions"):
            for row_id, position in pairs:
                container = db.session.get(model, row_id)
                if container is None or container.user_id != owner_id:
                    continue
                container.position = position
                applied.append(row_id)
            self._audit(owner_id, "positions_synced", ids=applied)

        skipped = len(pairs) - len(applied)
        if skipped:
            logger.info(
                f"{self.family.key} position sync for user {owner_id} skipped {skipped} rows"
            )
        return applied

    # ─── Lanes ────────────────────────────────────────────────────

    def create_lane(self, owner_id, container_id, name, color=None):
        what = self.family.lane_key
        name = self._clean_name(name, what)
        color = self._clean_color(color, current_app.config["DEFAULT_LANE_COLOR"])

        model = self.family.lane_model
        with atomic(f"create {what}"):
            container = self._container_for(owner_id, container_id)
            lane = model(
                name=name,
                color=color,
                position=self._next_position(
                    model.position, self.family.lane_container_column == container.id
                ),
                **{self.family.lane_container_attr: container.id},
            )
            db.session.add(lane)
            db.session.flush()
            self._audit(
                owner_id, f"{what}_created",
                container_id=container.id, lane_id=lane.id, name=name,
            )
        logger.info(f"Created {what} {lane.id} on {self.family.key} {container_id}")
        return lane

    def update_lane(self, owner_id, container_id, lane_id, name=None, color=None):
        """Rename or recolor a lane. None leaves a field unchanged.

        ``container_id`` optionally scopes the lookup to one container.
        """
        what = self.family.lane_key
        changes = {}
        if name is not None:
            changes["name"] = self._clean_name(name, what)
        if color is not None:
            changes["color"] = self._clean_color(color, current_app.config["DEFAULT_LANE_COLOR"])

        with atomic(f"update {what}"):
            lane = self._lane_for(owner_id, lane_id)
            if container_id is not None and self._lane_container_id(lane) != container_id:
                raise NotFoundError(f"{what.capitalize()} not found.")
            for field, value in changes.items():
                setattr(lane, field, value)
            self._audit(
                owner_id, f"{what}_updated",
                container_id=self._lane_container_id(lane), lane_id=lane.id,
                fields=sorted(changes),
            )

        logger.info(f"Updated {what} {lane_id}: {', '.join(sorted(changes)) or 'no changes'}")
        return lane

    def delete_lane(self, owner_id, lane_id, container_id=None):
        """Delete a lane; its applications stay on the container, unlaned.

        ``container_id`` optionally scopes the lookup to one container.
        Returns the number of applications detached from the lane.
        """
        what = self.family.lane_key
        with atomic(f"delete {what}"):
            lane = self._lane_for(owner_id, lane_id)
            if container_id is not None and self._lane_container_id(lane) != container_id:
                raise NotFoundError(f"{what.capitalize()} not found.")
            self._lock_lanes(lane.id)
            items = self.lane_items(lane.id)
            for item in items:
                setattr(item, self.family.item_lane_attr, None)
                self._set_position(item, 0)
            db.session.flush()

            self._audit(
                owner_id, f"{what}_deleted",
                container_id=self._lane_container_id(lane), lane_id=lane.id,
                name=lane.name, detached=len(items),
            )
            db.session.delete(lane)

        logger.info(f"Deleted {what} {lane_id}, unassigned {len(items)} applications")
        return len(items)

    def sync_lane_positions(self, owner_id, container_id, positions):
        """Persist lane positions for one container.

        Lanes outside the container are skipped. Returns the updated ids.
        """
        pairs = self._clean_positions(positions)
        model = self.family.lane_model
        applied = []
        with atomic(f"update {self.family.lane_key} positions"):
            container = self._container_for(owner_id, container_id)
            for row_id, position in pairs:
                lane = db.session.get(model, row_id)
                if lane is None or self._lane_container_id(lane) != container.id:
                    continue
                lane.position = position
                applied.append(row_id)
            self._audit(
                owner_id, f"{self.family.lane_key}_positions_synced",
                container_id=container.id, ids=applied,
            )
        logger.info(
            f"Synced {len(applied)}/{len(pairs)} {self.family.lane_key} positions "
            f"on {self.family.key} {container_id}"
        )
        return applied

    # ─── Items ────────────────────────────────────────────────────

    def reorder_item(self, owner_id, item_id, target_index):
        """Move an application to ``target_index`` within its current lane.

        Returns the lane's applications in their new order.
        """
        item_id = self._require_id(item_id, "application_id")
        target_index = self._require_index(target_index, "target index")

        with atomic(f"reorder {self.family.lane_key}"):
            item = self._item_for(owner_id, item_id)
            lane_id = self.lane_id_of(item)
            if lane_id is None:
                raise ValidationError(
                    f"Application is not in a {self.family.lane_key}."
                )
            self._lock_for_item(item)
            ordered = self._insert_at(lane_id, item, target_index)

        logger.info(
            f"Reordered application {item_id} in {self.family.lane_key} {lane_id} "
            f"to {self.position_of(item)}"
        )
        return ordered

    def transfer_item(self, owner_id, item_id, target_lane_id, target_index):
        """Move an application to ``target_index`` in another lane.

        The vacated lane is closed up and the target lane renumbered in one
        transaction. Same-lane transfers behave exactly like reorder_item.
        Returns (source lane items, target lane items).
        """
        item_id = self._require_id(item_id, "application_id")
        target_lane_id = self._require_id(target_lane_id, f"{self.family.lane_key}_id")
        target_index = self._require_index(target_index, "target index")

        with atomic("move application"):
            item = self._item_for(owner_id, item_id)
            target_lane = self._lane_for(owner_id, target_lane_id)
            self._lock_for_item(item, target_lane.id)

            source_lane_id = self.lane_id_of(item)
            if source_lane_id == target_lane.id:
                ordered = self._insert_at(target_lane.id, item, target_index)
                return ordered, ordered

            source_items = []
            if source_lane_id is not None:
                source_items = self.lane_items(source_lane_id, exclude_id=item.id)
                self._renumber(source_items)

            target_container_id = self._lane_container_id(target_lane)
            previous_container_id = self.container_id_of(item)
            setattr(item, self.family.item_container_attr, target_container_id)
            setattr(item, self.family.item_lane_attr, target_lane.id)
            target_items = self._insert_at(target_lane.id, item, target_index)

            self._record_lane_change(
                owner_id, item, source_lane_id, target_lane,
                previous_container_id, target_container_id,
            )

        logger.info(
            f"Moved application {item.id} from {self.family.lane_key} "
            f"{source_lane_id} to {target_lane.id} at {self.position_of(item)}"
        )
        return source_items, target_items

    def move_item(self, owner_id, container_id, item_id, lane_id, target_index):
        """Drag-and-drop entry point scoped to one container.

        The application must already be on ``container_id`` and the lane must
        belong to it. Dispatches to reorder_item or transfer_item.
        """
        container_id = self._require_id(container_id, f"{self.family.key}_id")
        item_id = self._require_id(item_id, "application_id")
        lane_id = self._require_id(lane_id, f"{self.family.lane_key}_id")
        self._require_index(target_index, "target index")

        container = self._container_for(owner_id, container_id)
        item = db.session.get(Application, item_id)
        if item is None or self.container_id_of(item) != container.id:
            raise NotFoundError(f"Application is not on this {self.family.key}.")
        lane = db.session.get(self.family.lane_model, lane_id)
        if lane is None or self._lane_container_id(lane) != container.id:
            raise NotFoundError(f"{self.family.lane_key.capitalize()} not found.")

        if self.lane_id_of(item) == lane.id:
            ordered = self.reorder_item(owner_id, item_id, target_index)
            return ordered, ordered
        return self.transfer_item(owner_id, item_id, lane_id, target_index)

    def add_item(self, owner_id, item_id, lane_id, container_id=None):
        """Put an application at the end of a lane (max position + 1).

        An application already in another lane of this family leaves it,
        and that lane is closed up. ``container_id`` optionally requires the
        lane to belong to that container. Returns the target lane's
        applications.
        """
        item_id = self._require_id(item_id, "application_id")
        lane_id = self._require_id(lane_id, f"{self.family.lane_key}_id")
        what = self.family.key

        with atomic(f"add application to {what}"):
            item = self._item_for(owner_id, item_id)
            lane = self._lane_for(owner_id, lane_id)
            if container_id is not None and self._lane_container_id(lane) != container_id:
                raise NotFoundError(f"{self.family.lane_key.capitalize()} not found.")
            self._lock_for_item(item, lane.id)

            source_lane_id = self.lane_id_of(item)
            if source_lane_id == lane.id:
                return self.lane_items(lane.id)
            if source_lane_id is not None:
                self._renumber(self.lane_items(source_lane_id, exclude_id=item.id))

            previous_container_id = self.container_id_of(item)
            container_id = self._lane_container_id(lane)
            position = self._next_position(
                self.family.item_position_column,
                self.family.item_lane_column == lane.id,
                Application.id != item.id,
            )
            self._place(item, container_id, lane.id, position)
            db.session.flush()

            if previous_container_id != container_id:
                add_to_timeline(
                    item, owner_id, f"added_to_{what}",
                    f"Added to {what} in {self.family.lane_key} {lane.name}",
                    {f"{what}_id": container_id, "lane_id": lane.id},
                )
            else:
                self._record_lane_change(
                    owner_id, item, source_lane_id, lane,
                    previous_container_id, container_id,
                )
            ordered = self.lane_items(lane.id)

        logger.info(f"Added application {item_id} to {self.family.lane_key} {lane_id} at {position}")
        return ordered

    def detach_item(self, owner_id, item_id, container_id=None):
        """Take an application off its container without deleting it.

        The vacated lane is renumbered. Calling this on an unplaced
        application is a no-op. With ``container_id`` given, an application
        placed on a different container is reported as not found.
        """
        item_id = self._require_id(item_id, "application_id")
        what = self.family.key
        scope_id = container_id

        with atomic(f"remove application from {what}"):
            if scope_id is not None:
                self._container_for(owner_id, scope_id)
            item = self._item_for(owner_id, item_id)
            container_id = self.container_id_of(item)
            if scope_id is not None and container_id not in (None, scope_id):
                raise NotFoundError(f"Application is not on this {what}.")
            if container_id is None:
                return item
            self._lock_for_item(item)

            lane_id = self.lane_id_of(item)
            self._detach(item)
            if lane_id is not None:
                self._renumber(self.lane_items(lane_id, exclude_id=item.id))
            add_to_timeline(
                item, owner_id, f"removed_from_{what}",
                f"Removed from {what}",
                {f"{what}_id": container_id, "lane_id": lane_id},
            )

        logger.info(f"Detached application {item_id} from {what} {container_id}")
        return item

    def _insert_at(self, lane_id, item, index):
        """Place ``item`` at visual ``index`` (clamped) and renumber the lane."""
        siblings = self.lane_items(lane_id, exclude_id=item.id)
        index = min(index, len(siblings))
        siblings.insert(index, item)
        self._renumber(siblings)
        db.session.flush()
        return siblings

    def _record_lane_change(self, owner_id, item, source_lane_id, target_lane,
                            previous_container_id, target_container_id):
        source_lane = (
            db.session.get(self.family.lane_model, source_lane_id)
            if source_lane_id else None
        )
        source_name = source_lane.name if source_lane else "Unassigned"
        add_to_timeline(
            item, owner_id, f"{self.family.lane_key}_changed",
            f"Moved from {source_name} to {target_lane.name}",
            {
                "from_lane_id": source_lane_id,
                "to_lane_id": target_lane.id,
                f"from_{self.family.key}_id": previous_container_id,
                f"to_{self.family.key}_id": target_container_id,
            },
        )

    # ─── Read model ───────────────────────────────────────────────

    def get_layout(self, owner_id, container_id):
        """Everything the board/service page needs, in display order.

        Returns a dict with the container, its lanes paired with their
        applications, applications on the container without a lane, and the
        owner's applications not yet on any container of this family.
        """
        container = self._container_for(owner_id, container_id)
        lanes = [(lane, self.lane_items(lane.id)) for lane in self.lanes_of(container.id)]
        unassigned = (
            Application.query
            .filter(
                self.family.item_container_column == container.id,
                self.family.item_lane_column.is_(None),
            )
            .order_by(Application.created_at, Application.id)
            .all()
        )
        available = (
            Application.query
            .filter(
                Application.user_id == owner_id,
                self.family.item_container_column.is_(None),
                Application.is_archived.is_(False),
            )
            .order_by(Application.created_at.desc(), Application.id)
            .limit(current_app.config["AVAILABLE_ITEMS_LIMIT"])
            .all()
        )
        return {
            "container": container,
            "lanes": lanes,
            "unassigned": unassigned,
            "available": available,
        }

    # ─── Maintenance ──────────────────────────────────────────────

    def renumber_all(self):
        """Renumber every lane of this family to contiguous positions.

        Returns the number of applications whose position changed.
        """
        changed = 0
        with atomic(f"renumber {self.family.lane_key}s"):
            for lane in self.family.lane_model.query.order_by(self.family.lane_model.id).all():
                self._lock_lanes(lane.id)
                changed += self._renumber(self.lane_items(lane.id))
        if changed:
            logger.info(f"Renumbered {changed} {self.family.key} placements")
        return changed
