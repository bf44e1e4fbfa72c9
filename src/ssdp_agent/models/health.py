from .common import FrozenPydanticModel


class ReceiveLoopHealth(FrozenPydanticModel):
    """Point-in-time status of the receive loop.

    A loop that died on a closed socket shows `running=False` with
    `stopped_reason` set, instead of the cache merely ceasing to update.
    """
    running: bool = False
    datagrams_received: int = 0
    responses_cached: int = 0
    responses_without_usn: int = 0
    datagrams_ignored: int = 0
    datagrams_oversized: int = 0
    receive_errors: int = 0
    last_error: str | None = None
    stopped_reason: str | None = None
