"""One chat-completion request over plain HTTP JSON."""
import logging

import requests
from pydantic import ValidationError

from .. import settings as env
from ..config import DeluluSettings
from ..domain.models import ChatCompletionRequest, ChatCompletionResponse, ChatMessage
from ..errors import TransportError, UnexpectedResponseError

log = logging.getLogger("delulu.llm.completion")


def build_request(model: str, system_message: str, user_message: str) -> ChatCompletionRequest:
    return ChatCompletionRequest(
        model=model,
        messages=[
            ChatMessage(role="system", content=system_message),
            ChatMessage(role="user", content=user_message),
        ],
    )


def extract_content(data) -> str:
    """choices[0].message.content of a parsed response body."""
    try:
        parsed = ChatCompletionResponse.model_validate(data)
    except ValidationError as e:
        log.error("Unexpected response structure from API: %s", e)
        raise UnexpectedResponseError(body=data) from e
    return parsed.choices[0].message.content


class CompletionClient:
    """POSTs a system and a user message to the configured endpoint. No retries.

    An injected session is left open for its owner; otherwise each call opens
    its own session and closes it before returning.
    """

    def __init__(self, settings: DeluluSettings, session: requests.Session | None = None):
        self.endpoint = settings.endpoint
        self.model = settings.model
        self.api_key = settings.api_key or env.openai_api_key()
        self.session = session

    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def complete(self, system_message: str, user_message: str) -> str:
        log.info("Requesting completion | endpoint=%s | model=%s", self.endpoint, self.model)
        log.debug("System message: %s", system_message)
        body = build_request(self.model, system_message, user_message).model_dump()

        if self.session is not None:
            resp = self._post(self.session, body)
        else:
            with requests.Session() as session:
                resp = self._post(session, body)

        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError(
                f"Endpoint returned a non-JSON body (status {resp.status_code})"
            ) from e

        if not resp.ok:
            log.warning("Endpoint answered with status %d", resp.status_code)
        content = extract_content(data)
        log.info("Completion received | chars=%d", len(content))
        return content

    def _post(self, session: requests.Session, body: dict) -> requests.Response:
        try:
            return session.post(self.endpoint, json=body, headers=self.headers())
        except requests.RequestException as e:
            raise TransportError(f"Request to {self.endpoint} failed: {e}") from e
