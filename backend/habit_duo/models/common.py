"""
Result wrappers shared by the gateways
"""
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class LocallyApplied(BaseModel, Generic[T]):
    """
    Result of a mutation that succeeded remotely and was mirrored into the
    local cache without re-reading the store.

    The local value may differ from the server's until the next fetch_all
    (server-side defaults, triggers, concurrent writers).
    """
    data: T
    verified: bool = Field(default=False, description="Always False: the value was not re-read from the store")
