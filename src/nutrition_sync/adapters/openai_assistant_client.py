"""OpenAI Responses API client for the nutrition assistant."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrition_sync.domain.chat import ChatMessage
from nutrition_sync.services.assistant import AssistantClient, to_data_url


@dataclass
class OpenAIAssistantClient(AssistantClient):
    """Assistant client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIAssistantClient":
        """Create an OpenAI assistant client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        messages: list[ChatMessage],
    ) -> str:
        """Call OpenAI Responses API with the conversation so far."""
        request_payload: dict[str, object] = {
            "model": model,
            "instructions": instructions,
            "input": [_to_input_item(message) for message in messages],
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text


def _to_input_item(message: ChatMessage) -> dict[str, object]:
    if message.role == "model":
        return {"role": "assistant", "content": message.text}
    content: list[dict[str, str]] = [{"type": "input_text", "text": message.text}]
    if message.image is not None:
        content.append({"type": "input_image", "image_url": to_data_url(message.image)})
    return {"role": "user", "content": content}
