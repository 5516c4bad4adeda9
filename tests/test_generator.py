"""Tests for the completion client and LaTeX normalization."""

import asyncio

import pytest

from conftest import FakeChatClient
from cougar_tutor.config import FALLBACK_REPLY, MAX_OUTPUT_TOKENS, TEMPERATURE
from cougar_tutor.errors import CompletionError
from cougar_tutor.rag.generator import Generator, normalize_latex

MESSAGES = [{"role": "system", "content": "persona"}, {"role": "user", "content": "What is a limit?"}]


def complete(client) -> str:
    return asyncio.run(Generator(model="fake-model", client=client).complete(MESSAGES))


class TestComplete:
    def test_returns_content(self, chat_client):
        assert complete(chat_client) == chat_client.content

    def test_sends_messages_and_sampling_options(self, chat_client):
        complete(chat_client)
        call = chat_client.calls[0]
        assert call["model"] == "fake-model"
        assert call["messages"] == MESSAGES
        assert call["options"] == {"temperature": TEMPERATURE, "num_predict": MAX_OUTPUT_TOKENS}

    def test_sampling_constants(self):
        assert TEMPERATURE == 0.6
        assert MAX_OUTPUT_TOKENS == 500

    @pytest.mark.parametrize("content", [None, "", "   \n"])
    def test_empty_content_uses_fallback(self, content):
        assert complete(FakeChatClient(content=content)) == FALLBACK_REPLY

    def test_missing_message_uses_fallback(self):
        class NoMessageClient:
            async def chat(self, **_):
                return {"done": True}

        assert complete(NoMessageClient()) == FALLBACK_REPLY

    def test_transport_error_raises_completion_error(self):
        with pytest.raises(CompletionError):
            complete(FakeChatClient(error=ConnectionError("refused")))

    def test_unreadable_response_raises_completion_error(self):
        class GarbageClient:
            async def chat(self, **_):
                return object()

        with pytest.raises(CompletionError):
            complete(GarbageClient())


class TestNormalizeLatex:
    def test_display_math(self):
        assert normalize_latex("Consider \\[ \\int_0^1 x\\,dx \\] now.") == "Consider $$ \\int_0^1 x\\,dx $$ now."

    def test_inline_math(self):
        assert normalize_latex("The slope \\(f'(a)\\) exists.") == "The slope $f'(a)$ exists."

    def test_multiline_display(self):
        assert normalize_latex("\\[\nx^2\n\\]") == "$$\nx^2\n$$"

    def test_mixed(self):
        text = "If \\(x>0\\) then\n\\[ y = \\sqrt{x} \\] and \\(y>0\\)."
        assert normalize_latex(text) == "If $x>0$ then\n$$ y = \\sqrt{x} $$ and $y>0$."

    def test_exported_math_markers(self):
        text = "$begin:math:text$ x^2 $end:math:text$ and $begin:math:display$ \\frac{1}{2} $end:math:display$"
        assert normalize_latex(text) == "$ x^2 $ and $$ \\frac{1}{2} $$"

    def test_dollar_math_untouched(self):
        text = "Already fine: $x$ and $$y$$."
        assert normalize_latex(text) == text
