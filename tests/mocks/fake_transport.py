"""In-memory transports for exercising the broadcaster without sockets."""


class RecordingTransport:
    """Keeps every (channel, event, payload) it is asked to send, in order."""

    def __init__(self):
        self.sent: list[tuple[str, str, dict]] = []

    async def send(self, channel: str, event: str, payload: dict) -> None:
        self.sent.append((channel, event, payload))

    def events(self, channel: str | None = None) -> list[str]:
        return [event for ch, event, _ in self.sent if channel is None or ch == channel]

    def payloads(self, channel: str, event: str) -> list[dict]:
        return [payload for ch, ev, payload in self.sent if ch == channel and ev == event]

    def channels(self) -> set[str]:
        return {ch for ch, _, _ in self.sent}

    def clear(self) -> None:
        self.sent.clear()


class FailingTransport(RecordingTransport):
    """Raises for events named in ``fail_on``; records the rest."""

    def __init__(self, fail_on: set[str] | None = None):
        super().__init__()
        self.fail_on = fail_on
        self.attempts = 0

    async def send(self, channel: str, event: str, payload: dict) -> None:
        self.attempts += 1
        if self.fail_on is None or event in self.fail_on:
            raise ConnectionError(f"transport down for {event}")
        await super().send(channel, event, payload)
