from agency.dependencies import get_team_controller
from agency.routes.entities import image_entity_router
from agency.schemas import TeamMemberOut

router = image_entity_router(get_team_controller, TeamMemberOut)
