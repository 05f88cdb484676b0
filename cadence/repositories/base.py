from typing import Protocol, TypeVar

T = TypeVar("T")
ID = TypeVar("ID", contravariant=True)


class Repository(Protocol[T, ID]):
    async def get(self, id: ID) -> T | None: ...

    async def update(self, id: ID, updates: dict) -> T | None: ...
