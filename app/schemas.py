from pydantic import BaseModel, Field


# --- Article ---

class CreateArticleRequest(BaseModel):
    name: str = Field(max_length=255)


class UpdateArticleRequest(BaseModel):
    name: str = Field(max_length=255)


class ArticleResponse(BaseModel):
    id: str
    name: str
