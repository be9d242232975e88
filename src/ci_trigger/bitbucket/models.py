from pydantic import BaseModel


class Author(BaseModel):
    raw: str = ""


class Target(BaseModel):
    hash: str
    message: str = ""
    author: Author | None = None


class Ref(BaseModel):
    type: str
    name: str
    target: Target | None = None


class Change(BaseModel):
    new: Ref | None = None
    old: Ref | None = None


class Push(BaseModel):
    changes: list[Change] = []


class PushEvent(BaseModel):
    push: Push
