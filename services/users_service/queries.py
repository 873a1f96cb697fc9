from dataclasses import dataclass

from shared.decorator import apply_query_decorators

from .commands import UserRepository
from .domain.user import User


@dataclass(frozen=True)
class GetUser:
    user_uuid: str


class GetUserHandler:
    def __init__(self, repo: UserRepository):
        if repo is None:
            raise ValueError("nil repo")
        self.repo = repo

    async def handle(self, query: GetUser) -> User:
        return await self.repo.get_user(query.user_uuid)


def new_get_user_handler(repo, logger):
    return apply_query_decorators(GetUserHandler(repo), logger)
