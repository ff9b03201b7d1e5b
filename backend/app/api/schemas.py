from pydantic import BaseModel


class GraphStatsResponse(BaseModel):
    users: int
    posts: int
    comments: int
    follows: int
    likes: int
