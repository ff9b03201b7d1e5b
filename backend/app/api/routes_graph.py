from fastapi import APIRouter, Depends

from backend.app.api.schemas import GraphStatsResponse
from backend.app.dependencies import get_social_graph_service
from backend.app.services.social_graph_service import SocialGraphService

router = APIRouter()


@router.get("/stats", response_model=GraphStatsResponse)
def graph_stats(service: SocialGraphService = Depends(get_social_graph_service)):
    return GraphStatsResponse(**service.stats())
