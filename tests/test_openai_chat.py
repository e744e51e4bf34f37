"""Tests for the OpenAI chat adapter."""

from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from zeta.adapters.openai_chat import OpenAIChatService


def _completion(content):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


@pytest.fixture
def client():
    return MagicMock()


class TestOpenAIChatService:
    def test_generate_returns_stripped_content(self, client):
        client.chat.completions.create.return_value = _completion('  {"index": 1}\n')
        service = OpenAIChatService(api_key="sk-test", client=client)
        assert service.generate("pick one") == '{"index": 1}'

    def test_sends_json_mode_and_prompt(self, client):
        client.chat.completions.create.return_value = _completion("{}")
        service = OpenAIChatService(api_key="sk-test", model="gpt-4o", client=client)
        service.generate("pick one")
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][-1] == {"role": "user", "content": "pick one"}

    def test_plain_mode(self, client):
        client.chat.completions.create.return_value = _completion("ok")
        OpenAIChatService(api_key="sk-test", json_mode=False, client=client).generate("hi")
        assert "response_format" not in client.chat.completions.create.call_args.kwargs

    def test_api_error_becomes_runtime_error(self, client):
        client.chat.completions.create.side_effect = OpenAIError("timed out")
        service = OpenAIChatService(api_key="sk-test", client=client)
        with pytest.raises(RuntimeError, match="timed out"):
            service.generate("pick one")

    def test_missing_content(self, client):
        client.chat.completions.create.return_value = _completion(None)
        service = OpenAIChatService(api_key="sk-test", client=client)
        with pytest.raises(RuntimeError, match="missing content"):
            service.generate("pick one")
