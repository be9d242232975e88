from pydantic import BaseModel


class CommitUser(BaseModel):
    name: str = ""
    email: str = ""
    username: str | None = None


class HeadCommit(BaseModel):
    id: str
    message: str = ""
    author: CommitUser = CommitUser()
    committer: CommitUser = CommitUser()


class Repository(BaseModel):
    full_name: str = ""
    clone_url: str = ""


class PushEvent(BaseModel):
    ref: str
    after: str = ""
    head_commit: HeadCommit | None = None
    repository: Repository | None = None
