from pydantic import BaseModel


class CommitAuthor(BaseModel):
    name: str = ""
    email: str = ""


class Commit(BaseModel):
    id: str
    message: str = ""
    author: CommitAuthor = CommitAuthor()


class PushHook(BaseModel):
    object_kind: str = "push"
    ref: str
    before: str = ""
    after: str = ""
    checkout_sha: str | None = None
    commits: list[Commit] = []
