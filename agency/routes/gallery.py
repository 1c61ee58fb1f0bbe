from agency.dependencies import get_gallery_controller
from agency.routes.entities import image_entity_router
from agency.schemas import GalleryImageOut

router = image_entity_router(get_gallery_controller, GalleryImageOut)
