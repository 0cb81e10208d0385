"""The two layout families wired onto the repositioning engine.

- board_engine:   Board / BoardList / Application.board_*
- service_engine: Service / ServiceStage / Application.service_*
"""

from app.models.board import Board, BoardList
from app.models.service import Service, ServiceStage
from app.services.positioning import LayoutFamily, RepositioningEngine

BOARDS = LayoutFamily(
    key="board",
    lane_key="list",
    container_model=Board,
    lane_model=BoardList,
    lane_container_attr="board_id",
    item_container_attr="board_id",
    item_lane_attr="board_list_id",
    item_position_attr="board_position",
)

SERVICES = LayoutFamily(
    key="service",
    lane_key="stage",
    container_model=Service,
    lane_model=ServiceStage,
    lane_container_attr="service_id",
    item_container_attr="service_id",
    item_lane_attr="service_stage_id",
    item_position_attr="service_position",
)

board_engine = RepositioningEngine(BOARDS)
service_engine = RepositioningEngine(SERVICES)

# CLI / blueprint lookup by URL segment
ENGINES = {
    "boards": board_engine,
    "services": service_engine,
}
