from unittest.mock import MagicMock, patch

import pytest

from llm_client import generate


def test_generate_uses_web_search_tool() -> None:
    mock_client = MagicMock()
    mock_client.responses.create.return_value = MagicMock(output_text='[{"title": "X"}]')

    with patch("llm_client.OpenAI", return_value=mock_client), \
         patch.dict("os.environ", {"OPENAI_API_KEY": "test-key"}):
        result = generate("find papers", model="gpt-test")

    assert result == '[{"title": "X"}]'
    mock_client.responses.create.assert_called_once_with(
        model="gpt-test",
        input="find papers",
        tools=[{"type": "web_search"}],
    )


def test_generate_without_grounding_omits_tools() -> None:
    mock_client = MagicMock()
    mock_client.responses.create.return_value = MagicMock(output_text="")

    with patch("llm_client.OpenAI", return_value=mock_client), \
         patch.dict("os.environ", {"OPENAI_API_KEY": "test-key"}):
        assert generate("plain", grounded=False) == ""

    assert "tools" not in mock_client.responses.create.call_args.kwargs


def test_generate_raises_without_api_key() -> None:
    with patch.dict("os.environ", {}, clear=True):
        with pytest.raises(RuntimeError, match="OPENAI_API_KEY"):
            generate("find papers")
