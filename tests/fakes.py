from __future__ import annotations

from healthvision.errors import GatewayError


class FakeGateway:
    """Scripted stand-in for ModelGateway; exceptions in the script are raised."""

    def __init__(self, replies=(), configured: bool = True, model: str = "test-model", vision_model: str = "test-vision"):
        self.replies = list(replies)
        self.configured = configured
        self.model = model
        self.vision_model = vision_model
        self.calls: list[dict] = []

    async def complete(self, prompt, image=None, **kwargs):
        self.calls.append({"prompt": prompt, "image": image, **kwargs})
        if not self.replies:
            raise GatewayError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply
